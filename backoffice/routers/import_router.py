from decimal import Decimal, InvalidOperation
from pathlib import Path
import uuid

import pandas as pd
import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.db.session import get_db, unit_of_work
from backoffice.repositories.suppliers import SupplierRepository
from backoffice.schemas import AddressIn, ProductIn, SupplierIn
from backoffice.services.catalog import ProductService
from backoffice.services.parties import SupplierService

logger = structlog.get_logger(__name__)

router = APIRouter()

REQUIRED_SUPPLIERS = {"name", "tax_id"}
REQUIRED_PRODUCTS = {"name", "stock_quantity"}
ADDRESS_COLUMNS = ("street", "number", "complement", "district", "city", "state", "postal_code")

ERROR_DIR = Path(get_settings().IMPORT_ERROR_DIR)
ERROR_DIR.mkdir(parents=True, exist_ok=True)


def read_csv(upload: UploadFile) -> pd.DataFrame:
    if not upload.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail=f"{upload.filename} must be a CSV")
    try:
        return pd.read_csv(upload.file, dtype=str, keep_default_na=False)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"{upload.filename}: could not read CSV: {e}")


def missing_cols(df: pd.DataFrame, required: set[str]) -> list[str]:
    return sorted(list(required - set(df.columns)))


def cell(row: pd.Series, column: str) -> str | None:
    value = str(row.get(column, "")).strip()
    return value or None


def add_error(
    errors: list,
    *,
    file: str,
    row: int | None,
    field: str,
    code: str,
    message: str,
    value: str = "",
    suggestion: str = "",
):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })


def write_report(errors: list) -> str:
    report_id = uuid.uuid4().hex
    pd.DataFrame(errors).to_csv(ERROR_DIR / f"{report_id}.csv", index=False)
    return report_id


def collect_errors(
    df_s: pd.DataFrame,
    df_p: pd.DataFrame,
    suppliers_name: str,
    products_name: str,
    known_tax_ids: set[str],
) -> list[dict]:
    errors: list[dict] = []

    ms = missing_cols(df_s, REQUIRED_SUPPLIERS)
    mp = missing_cols(df_p, REQUIRED_PRODUCTS)
    if ms:
        add_error(errors, file=suppliers_name, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(ms), suggestion="Add these columns to header.")
    if mp:
        add_error(errors, file=products_name, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(mp), suggestion="Add these columns to header.")
    # row checks need the columns
    if errors:
        return errors

    seen: set[str] = set()
    for idx, row in df_s.iterrows():
        csv_row = int(idx) + 2
        if not cell(row, "name"):
            add_error(errors, file=suppliers_name, row=csv_row, field="name", code="REQUIRED",
                      message="name is required", suggestion="Provide a non-empty name.")
        tax_id = cell(row, "tax_id")
        if not tax_id:
            add_error(errors, file=suppliers_name, row=csv_row, field="tax_id", code="REQUIRED",
                      message="tax_id is required", suggestion="Provide a non-empty tax_id.")
        elif tax_id in seen:
            add_error(errors, file=suppliers_name, row=csv_row, field="tax_id", code="DUPLICATE",
                      message="tax_id appears more than once in the file", value=tax_id)
        else:
            seen.add(tax_id)
        state = cell(row, "state")
        if state and len(state) != 2:
            add_error(errors, file=suppliers_name, row=csv_row, field="state", code="BAD_STATE",
                      message="state must be a 2-letter code", value=state, suggestion="Use e.g. SP.")

    for idx, row in df_p.iterrows():
        csv_row = int(idx) + 2
        if not cell(row, "name"):
            add_error(errors, file=products_name, row=csv_row, field="name", code="REQUIRED",
                      message="name is required", suggestion="Provide a non-empty name.")

        try:
            stock = int(cell(row, "stock_quantity") or "")
            if stock < 0:
                raise ValueError()
        except ValueError:
            add_error(errors, file=products_name, row=csv_row, field="stock_quantity", code="BAD_INT",
                      message="stock_quantity must be an integer >= 0", value=str(row.get("stock_quantity", "")))

        price = cell(row, "price")
        if price is not None:
            try:
                parsed = Decimal(price)
                if not parsed.is_finite() or parsed < 0 or parsed.as_tuple().exponent < -2:
                    raise InvalidOperation()
            except InvalidOperation:
                add_error(errors, file=products_name, row=csv_row, field="price", code="BAD_NUMBER",
                          message="price must be a number >= 0 with at most 2 decimals", value=price)

        supplier_tax_id = cell(row, "supplier_tax_id")
        if supplier_tax_id and supplier_tax_id not in seen | known_tax_ids:
            add_error(errors, file=products_name, row=csv_row, field="supplier_tax_id", code="UNKNOWN_SUPPLIER",
                      message="supplier_tax_id not found in suppliers.csv or the database", value=supplier_tax_id,
                      suggestion="Fix supplier_tax_id to match suppliers.csv.")

    return errors


def known_supplier_tax_ids(db: Session) -> set[str]:
    return {s.tax_id for s in SupplierRepository(db).find_all()}


@router.get("/error-report/{report_id}")
def download_error_report(report_id: str):
    path = ERROR_DIR / f"{report_id}.csv"
    if not path.exists():
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="import_error_report.csv")


@router.post("/validate")
async def validate_all(
    suppliers: UploadFile = File(...),
    products: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    df_s = read_csv(suppliers)
    df_p = read_csv(products)
    summary = {"suppliers_rows": int(len(df_s)), "products_rows": int(len(df_p))}

    errors = collect_errors(df_s, df_p, suppliers.filename, products.filename, known_supplier_tax_ids(db))
    if errors:
        report_id = write_report(errors)
        logger.info("import_validation_failed", errors=len(errors), report_id=report_id)
        return {
            "ok": False,
            "summary": summary,
            "errors_count": len(errors),
            "error_report_id": report_id,
            "error_report_url": f"/import/error-report/{report_id}",
            "errors_preview": errors[:25],
        }

    return {
        "ok": True,
        "summary": summary,
        "errors_count": 0,
        "errors_preview": [],
    }


@router.post("/commit")
async def commit_import(
    suppliers: UploadFile = File(...),
    products: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    df_s = read_csv(suppliers)
    df_p = read_csv(products)

    errors = collect_errors(df_s, df_p, suppliers.filename, products.filename, known_supplier_tax_ids(db))
    if errors:
        raise HTTPException(status_code=400, detail="Import has errors. Run /import/validate first.")

    supplier_service = SupplierService(db)
    product_service = ProductService(db)

    # one transaction for the whole upload; the services join it
    with unit_of_work(db):
        created_suppliers = 0
        skipped_suppliers = 0
        for _, row in df_s.iterrows():
            tax_id = cell(row, "tax_id")
            if supplier_service.owners.exists_by_tax_id(tax_id):
                skipped_suppliers += 1
                continue
            address = {col: cell(row, col) for col in ADDRESS_COLUMNS if cell(row, col)}
            supplier_service.create(SupplierIn(
                name=cell(row, "name"),
                tax_id=tax_id,
                phone=cell(row, "phone"),
                email=cell(row, "email"),
                address=AddressIn(**address) if address else None,
            ))
            created_suppliers += 1

        for _, row in df_p.iterrows():
            supplier_tax_id = cell(row, "supplier_tax_id")
            supplier_id = supplier_service.get_by_tax_id(supplier_tax_id).id if supplier_tax_id else None
            product_service.create(ProductIn(
                name=cell(row, "name"),
                description=cell(row, "description"),
                price=cell(row, "price"),
                stock_quantity=int(cell(row, "stock_quantity")),
                supplier_id=supplier_id,
            ))

    logger.info("import_committed", suppliers=created_suppliers, products=len(df_p))
    return {
        "ok": True,
        "saved": {
            "suppliers_created": created_suppliers,
            "suppliers_skipped": skipped_suppliers,
            "products_created": int(len(df_p)),
        },
        "note": "Suppliers whose tax_id already exists are skipped. Rows are saved all or nothing.",
    }
