import logging
from typing import Dict, Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from exceptions import NotFoundError, DuplicateRecordError
from models.results import ResultRecord
from schemas.results import ResultCreate, ResultUpdate, SubjectMark
from security import verify_admin
from services.merit import merit_outcome, merit_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/results", tags=["Results"])

# payload field -> column
UPDATABLE_FIELDS = {
    "roll": "roll",
    "name": "student_name",
    "class_name": "class_name",
    "exam_type": "exam_type",
    "year": "year",
}


# ===========================
#      HELPERS
# ===========================
def dump_marks(marks: Dict[str, SubjectMark]) -> Dict[str, Dict[str, float]]:
    return {subject: mark.model_dump(exclude_none=True) for subject, mark in marks.items()}


def serialize_result(r: ResultRecord) -> Dict[str, Any]:
    return {
        "id": r.id,
        "roll": r.roll,
        "name": r.student_name,
        "class": r.class_name,
        "examType": r.exam_type,
        "year": r.year,
        "marks": r.marks,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
    }


def fetch_cohort(db: Session, class_name: str, exam_type: str, year: int) -> List[ResultRecord]:
    """All results of one class/exam/year, in insertion order so equal totals keep a stable order"""
    return db.query(ResultRecord).filter(
        ResultRecord.class_name == class_name,
        ResultRecord.exam_type == exam_type,
        ResultRecord.year == year,
    ).order_by(ResultRecord.created_at.asc(), ResultRecord.id.asc()).all()


def commit_or_duplicate(db: Session, key: Dict[str, Any]):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Duplicate result rejected: %s", key)
        raise DuplicateRecordError("Result already exists", details=key)


# ===========================
#   PART 1: PUBLISH / MANAGE (Admin)
# ===========================

# 1. Publish Result
@router.post("")
def publish_result(payload: ResultCreate, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    new_result = ResultRecord(
        roll=payload.roll,
        student_name=payload.name,
        class_name=payload.class_name,
        exam_type=payload.exam_type,
        year=payload.year,
        marks=dump_marks(payload.marks),
    )
    db.add(new_result)

    # uniqueness is enforced by uq_result_key, not by a lookup first
    commit_or_duplicate(db, {
        "roll": payload.roll, "class": payload.class_name,
        "examType": payload.exam_type, "year": payload.year,
    })
    db.refresh(new_result)

    logger.info("Result published: roll %s, class %s, %s %s",
                new_result.roll, new_result.class_name, new_result.exam_type, new_result.year)
    return {"success": True, "insertedId": new_result.id, "data": serialize_result(new_result)}


# 2. Update Result
@router.put("/{result_id}")
def update_result(result_id: int, payload: ResultUpdate, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    result = db.query(ResultRecord).filter(ResultRecord.id == result_id).first()
    if not result:
        raise NotFoundError("Result", details={"id": result_id})

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, column in UPDATABLE_FIELDS.items():
        if field in changes:
            setattr(result, column, changes[field])
    if payload.marks is not None:
        result.marks = dump_marks(payload.marks)

    commit_or_duplicate(db, {
        "roll": result.roll, "class": result.class_name,
        "examType": result.exam_type, "year": result.year,
    })
    db.refresh(result)
    return {"success": True, "data": serialize_result(result)}


# 3. Delete Result
@router.delete("/{result_id}")
def delete_result(result_id: int, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    result = db.query(ResultRecord).filter(ResultRecord.id == result_id).first()
    if not result:
        raise NotFoundError("Result", details={"id": result_id})

    db.delete(result)
    db.commit()
    logger.info("Result %s deleted", result_id)
    return {"success": True, "deletedCount": 1}


# ===========================
#   PART 2: PUBLIC LOOKUPS
# ===========================

# 4. List Results (optional filters)
@router.get("")
def list_results(
    class_name: Optional[str] = Query(None, alias="class"),
    exam_type: Optional[str] = Query(None, alias="examType"),
    year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    query = db.query(ResultRecord)
    if class_name:
        query = query.filter(ResultRecord.class_name == class_name)
    if exam_type:
        query = query.filter(ResultRecord.exam_type == exam_type)
    if year is not None:
        query = query.filter(ResultRecord.year == year)

    results = query.order_by(ResultRecord.created_at.asc(), ResultRecord.id.asc()).all()
    return [serialize_result(r) for r in results]


# 5. Result + Merit Position of one student
@router.get("/student/{roll}/{class_id}/{exam_type}/{year}")
def get_student_result(roll: str, class_id: str, exam_type: str, year: int, db: Session = Depends(get_db)):
    result = db.query(ResultRecord).filter(
        ResultRecord.roll == roll,
        ResultRecord.class_name == class_id,
        ResultRecord.exam_type == exam_type,
        ResultRecord.year == year,
    ).first()

    if not result:
        raise NotFoundError("Result", details={
            "roll": roll, "class": class_id, "examType": exam_type, "year": year,
        })

    cohort = fetch_cohort(db, class_id, exam_type, year)
    outcome = merit_outcome(result, cohort, settings.MERIT_RANKING)
    return {"success": True, "data": {**serialize_result(result), **outcome}}


# 6. Merit List of a whole cohort
@router.get("/merit-list/{class_id}/{exam_type}/{year}")
def get_merit_list(class_id: str, exam_type: str, year: int, db: Session = Depends(get_db)):
    cohort = fetch_cohort(db, class_id, exam_type, year)
    ranked = merit_list(cohort, settings.MERIT_RANKING)
    return {
        "success": True,
        "count": len(ranked),
        "data": [{**serialize_result(record), **outcome} for record, outcome in ranked],
    }
