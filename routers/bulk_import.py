"""
Result Bulk Import Router
Lets administrators upload an Excel/CSV mark sheet and publish the results
of a whole class in one go. Rows are validated one by one; the valid ones
are inserted in a single transaction.
"""

import io
import logging
from typing import List, Dict, Any, Optional, Tuple

import pandas as pd
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from exceptions import InvalidUploadError, DuplicateRecordError
from models.results import ResultRecord
from schemas.results import ResultCreate
from security import verify_admin
from routers.results import dump_marks

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/results/bulk-import", tags=["Bulk Import"])

REQUIRED_COLUMNS = ["roll", "name", "class", "exam_type", "year"]
WRITTEN_SUFFIX = "_written"
MCQ_SUFFIX = "_mcq"


# ==========================================
#   CELL HELPERS (NaN safe)
# ==========================================

def safe_str(value) -> Optional[str]:
    """Convert a cell to string; whole floats (12.0) lose the '.0' Excel adds"""
    if value is None or pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def safe_number(value) -> Optional[Any]:
    """Numbers pass through, blanks become None, anything else is left for validation"""
    if value is None or pd.isna(value):
        return None
    if isinstance(value, str):
        return value.strip() or None
    return float(value)


def result_exists(db: Session, data: ResultCreate) -> bool:
    return db.query(ResultRecord.id).filter(
        ResultRecord.roll == data.roll,
        ResultRecord.class_name == data.class_name,
        ResultRecord.exam_type == data.exam_type,
        ResultRecord.year == data.year,
    ).first() is not None


def read_sheet(filename: str, contents: bytes) -> pd.DataFrame:
    name = (filename or "").lower()
    if name.endswith(".csv"):
        df = pd.read_csv(io.BytesIO(contents))
    elif name.endswith(".xlsx"):
        df = pd.read_excel(io.BytesIO(contents), engine="openpyxl")
    elif name.endswith(".xls"):
        df = pd.read_excel(io.BytesIO(contents))
    else:
        raise InvalidUploadError("Invalid file format. Please upload .xlsx, .xls or .csv")

    df.columns = [str(c).strip() for c in df.columns]
    return df


def subject_columns(columns: List[str]) -> List[Tuple[str, str, Optional[str]]]:
    """(subject, written column, mcq column or None) for every '<subject>_written' header"""
    by_lower = {c.lower(): c for c in columns}
    subjects = []
    for col in columns:
        if col.lower().endswith(WRITTEN_SUFFIX):
            subject = col[:-len(WRITTEN_SUFFIX)].strip()
            mcq_col = by_lower.get((subject + MCQ_SUFFIX).lower())
            subjects.append((subject, col, mcq_col))
    return subjects


# ==========================================
#   MAIN BULK IMPORT ENDPOINT
# ==========================================

@router.post("")
async def bulk_import_results(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: dict = Depends(verify_admin),
):
    """
    Columns: roll, name, class, exam_type, year, then per subject
    '<subject>_written' and optionally '<subject>_mcq'.
    A subject left blank in a row is treated as not taken.
    """
    contents = await file.read()
    try:
        df = read_sheet(file.filename, contents)
    except InvalidUploadError:
        raise
    except Exception as e:
        raise InvalidUploadError(f"Error reading file: {str(e)}")

    columns_lower = {c.lower(): c for c in df.columns}
    missing = [c for c in REQUIRED_COLUMNS if c not in columns_lower]
    if missing:
        raise InvalidUploadError(f"Missing column(s): {', '.join(missing)}")

    subjects = subject_columns(list(df.columns))
    if not subjects:
        raise InvalidUploadError("No '<subject>_written' columns found")

    errors: List[Dict[str, Any]] = []
    results_to_add: List[ResultRecord] = []
    seen_keys = set()
    total_rows = len(df)

    for idx, row in df.iterrows():
        row_num = idx + 2  # header is row 1

        if row.isna().all():
            continue

        marks = {}
        for subject, written_col, mcq_col in subjects:
            written = safe_number(row.get(written_col))
            mcq = safe_number(row.get(mcq_col)) if mcq_col else None
            if written is None and mcq is None:
                continue
            marks[subject] = {"written": written, "mcq": mcq}

        payload = {
            "roll": safe_str(row.get(columns_lower["roll"])),
            "name": safe_str(row.get(columns_lower["name"])),
            "class": safe_str(row.get(columns_lower["class"])),
            "examType": safe_str(row.get(columns_lower["exam_type"])),
            "year": safe_str(row.get(columns_lower["year"])),
            "marks": marks,
        }

        try:
            data = ResultCreate.model_validate(payload)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            errors.append({"row": row_num, "error": problems})
            continue

        key = (data.roll, data.class_name, data.exam_type, data.year)
        if key in seen_keys:
            errors.append({"row": row_num, "error": f"Roll {data.roll} repeated in file"})
            continue

        if result_exists(db, data):
            errors.append({"row": row_num, "error": f"Result for roll {data.roll} already exists"})
            continue

        seen_keys.add(key)
        results_to_add.append(ResultRecord(
            roll=data.roll,
            student_name=data.name,
            class_name=data.class_name,
            exam_type=data.exam_type,
            year=data.year,
            marks=dump_marks(data.marks),
        ))

    imported_count = 0
    if results_to_add:
        db.add_all(results_to_add)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateRecordError("A result was published concurrently. No results were imported.")
        imported_count = len(results_to_add)

    logger.info("Bulk import %s: %s imported, %s errors", file.filename, imported_count, len(errors))
    return {
        "success": True,
        "total_rows": total_rows,
        "imported_count": imported_count,
        "error_count": len(errors),
        "errors": errors,
    }


# ==========================================
#   SAMPLE TEMPLATE
# ==========================================

@router.get("/template")
async def get_sample_template():
    return {
        "required_columns": REQUIRED_COLUMNS,
        "subject_columns": ["<subject>_written", "<subject>_mcq (optional)"],
        "example_header": ["roll", "name", "class", "exam_type", "year",
                           "Math_written", "Math_mcq", "English_written"],
        "notes": [
            "Leave both cells of a subject empty if the student did not take it",
            "Leave <subject>_mcq empty for written-only subjects",
            "Rows with errors are skipped and reported; the rest are imported together",
        ]
    }
