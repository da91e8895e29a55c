"""
Tests for the CSV catalog import.
"""

from backoffice.exceptions import ValidationFailure
from backoffice.services.catalog import ProductService

SUPPLIERS_CSV = (
    "name,tax_id,city,state\n"
    "Acme,11.111.111/0001-11,Recife,PE\n"
    "Globex,22.222.222/0001-22,,\n"
)

PRODUCTS_CSV = (
    "name,description,price,stock_quantity,supplier_tax_id\n"
    "Widget,Blue widget,19.90,5,11.111.111/0001-11\n"
    "Gadget,,7,40,22.222.222/0001-22\n"
    "Loose part,,,3,\n"
)


def upload(suppliers_csv=SUPPLIERS_CSV, products_csv=PRODUCTS_CSV, suppliers_name="suppliers.csv"):
    return {
        "suppliers": (suppliers_name, suppliers_csv.encode(), "text/csv"),
        "products": ("products.csv", products_csv.encode(), "text/csv"),
    }


class TestValidate:
    def test_clean_files(self, client):
        response = client.post("/import/validate", files=upload())
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["summary"] == {"suppliers_rows": 2, "products_rows": 3}
        assert body["errors_count"] == 0

    def test_errors_produce_downloadable_report(self, client):
        products = (
            "name,price,stock_quantity,supplier_tax_id\n"
            ",1.00,2,\n"
            "Widget,abc,-1,\n"
            "Gadget,1.999,1,99.999.999/0001-99\n"
        )
        response = client.post("/import/validate", files=upload(products_csv=products))
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False

        codes = sorted(e["code"] for e in body["errors_preview"])
        assert codes == ["BAD_INT", "BAD_NUMBER", "BAD_NUMBER", "REQUIRED", "UNKNOWN_SUPPLIER"]
        assert body["errors_count"] == 5

        report = client.get(body["error_report_url"])
        assert report.status_code == 200
        assert report.headers["content-type"].startswith("text/csv")
        assert "UNKNOWN_SUPPLIER" in report.text

    def test_missing_columns(self, client):
        response = client.post("/import/validate", files=upload(suppliers_csv="name\nAcme\n"))
        body = response.json()
        assert body["ok"] is False
        assert body["errors_preview"][0]["code"] == "MISSING_COLUMNS"
        assert body["errors_preview"][0]["value"] == "tax_id"

    def test_duplicate_tax_id_and_bad_state(self, client):
        suppliers = (
            "name,tax_id,state\n"
            "Acme,1,PE\n"
            "Acme again,1,Pernambuco\n"
        )
        products = "name,stock_quantity\nWidget,1\n"
        body = client.post("/import/validate", files=upload(suppliers, products)).json()
        assert sorted(e["code"] for e in body["errors_preview"]) == ["BAD_STATE", "DUPLICATE"]

    def test_supplier_known_from_database(self, client):
        client.post("/api/suppliers", json={"name": "Initech", "tax_id": "33"})
        products = "name,stock_quantity,supplier_tax_id\nStapler,1,33\n"
        body = client.post("/import/validate", files=upload(products_csv=products)).json()
        assert body["ok"] is True

    def test_non_csv_rejected(self, client):
        response = client.post("/import/validate", files=upload(suppliers_name="suppliers.xlsx"))
        assert response.status_code == 400

    def test_unknown_report(self, client):
        assert client.get("/import/error-report/nope").status_code == 404


class TestCommit:
    def test_commit_creates_catalog(self, client):
        response = client.post("/import/commit", files=upload())
        assert response.status_code == 200
        assert response.json()["saved"] == {
            "suppliers_created": 2,
            "suppliers_skipped": 0,
            "products_created": 3,
        }

        acme = client.get("/api/suppliers/tax-id/11.111.111/0001-11")
        assert acme.status_code == 200
        assert acme.json()["address"]["city"] == "Recife"
        assert client.get("/api/suppliers/tax-id/22.222.222/0001-22").json()["address"] is None

        products = client.get(f"/api/suppliers/{acme.json()['id']}/products").json()
        assert [p["name"] for p in products] == ["Widget"]

        loose = client.get("/api/products/search", params={"name": "loose"}).json()
        assert loose[0]["supplier_id"] is None
        assert loose[0]["price"] is None

    def test_existing_suppliers_are_skipped(self, client):
        client.post("/api/suppliers", json={"name": "Acme Ltd", "tax_id": "11.111.111/0001-11"})
        body = client.post("/import/commit", files=upload()).json()
        assert body["saved"]["suppliers_created"] == 1
        assert body["saved"]["suppliers_skipped"] == 1

        acme = client.get("/api/suppliers/tax-id/11.111.111/0001-11").json()
        assert acme["name"] == "Acme Ltd"

    def test_commit_with_errors_is_rejected(self, client):
        products = "name,stock_quantity\nWidget,many\n"
        response = client.post("/import/commit", files=upload(products_csv=products))
        assert response.status_code == 400
        assert client.get("/api/products").json() == []

    def test_failure_midway_rolls_back_whole_import(self, client, monkeypatch):
        original_create = ProductService.create
        calls = []

        def create_then_fail(self, data):
            calls.append(data.name)
            if len(calls) == 2:
                raise ValidationFailure("storage refused the row", fields=["name"])
            return original_create(self, data)

        monkeypatch.setattr(ProductService, "create", create_then_fail)

        response = client.post("/import/commit", files=upload())
        assert response.status_code == 422
        assert calls == ["Widget", "Gadget"]
        assert client.get("/api/suppliers").json() == []
        assert client.get("/api/products").json() == []
        assert client.get("/api/addresses").json() == []
