import logging
import random
import time
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from exceptions import NotFoundError, DuplicateRecordError
from models.students import Student
from schemas.students import StudentCreate, StudentUpdate
from security import verify_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])

STUDENT_ID_MIN = 10000
STUDENT_ID_MAX = 99999
STUDENT_ID_ATTEMPTS = 10


# ===============================
#   HELPERS
# ===============================

def student_id_taken(db: Session, candidate: str) -> bool:
    return db.query(Student.id).filter(Student.student_id == candidate).first() is not None


def generate_unique_student_id(db: Session) -> str:
    """Random free 5-digit id; after 10 collisions walk forward from the last 5 digits of the clock"""
    for _ in range(STUDENT_ID_ATTEMPTS):
        candidate = str(random.randint(STUDENT_ID_MIN, STUDENT_ID_MAX))
        if not student_id_taken(db, candidate):
            return candidate

    start = time.time_ns() // 1_000_000 % 100000
    for offset in range(100000):
        candidate = f"{(start + offset) % 100000:05d}"
        if not student_id_taken(db, candidate):
            return candidate
    raise DuplicateRecordError("No free student id left")


def serialize_student(s: Student) -> Dict[str, Any]:
    return {
        "id": s.id,
        "studentId": s.student_id,
        "name": s.name,
        "birthReg": s.birth_reg,
        "class": s.class_name,
        "year": s.year,
        "roll": s.roll,
        "section": s.section,
        "shift": s.shift,
        "group": s.group,
        "fatherName": s.father_name,
        "motherName": s.mother_name,
        "mobileNumber": s.mobile_number,
        "dob": s.dob.isoformat() if s.dob else None,
        "gender": s.gender,
        "address": s.address,
        "photo": s.photo,
        "createdAt": s.created_at.isoformat() if s.created_at else None,
    }


def commit_or_duplicate(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateRecordError("Student already exists")


# ===============================
#   STUDENT CRUD OPERATIONS
# ===============================

# GET /students  (public), filters: class, year, roll, section, shift, group
@router.get("")
def list_students(
    class_name: Optional[str] = Query(None, alias="class"),
    year: Optional[str] = None,
    roll: Optional[str] = None,
    section: Optional[str] = None,
    shift: Optional[str] = None,
    group: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Student)

    if class_name:
        query = query.filter(Student.class_name == class_name.strip())
    if year:
        query = query.filter(Student.year == year.strip())
    if roll:
        query = query.filter(Student.roll == roll.strip())
    if section:
        query = query.filter(Student.section == section)
    if shift:
        query = query.filter(Student.shift == shift)
    if group:
        query = query.filter(Student.group == group)

    students = query.order_by(Student.id.asc()).all()
    return [serialize_student(s) for s in students]


# ADD STUDENT (admin)
@router.post("")
def add_student(payload: StudentCreate, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    data = payload.model_dump(exclude={"student_id"})

    # keep a supplied id only if nobody has it yet
    student_id = payload.student_id
    if not student_id or student_id_taken(db, student_id):
        student_id = generate_unique_student_id(db)

    new_student = Student(student_id=student_id, **data)
    db.add(new_student)
    commit_or_duplicate(db)
    db.refresh(new_student)

    logger.info("Student %s added to class %s (%s)", new_student.student_id, new_student.class_name, new_student.year)
    return {"success": True, "insertedId": new_student.id, "studentId": new_student.student_id}


# UPDATE STUDENT (admin)
@router.put("/{id}")
def update_student(id: int, payload: StudentUpdate, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    student = db.query(Student).filter(Student.id == id).first()
    if not student:
        raise NotFoundError("Student", details={"id": id})

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(student, field, value)

    commit_or_duplicate(db)
    db.refresh(student)
    return {"success": True, "data": serialize_student(student)}


# DELETE STUDENT (admin)
@router.delete("/{id}")
def delete_student(id: int, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    student = db.query(Student).filter(Student.id == id).first()
    if not student:
        raise NotFoundError("Student", details={"id": id})

    student_id = student.student_id
    db.delete(student)
    db.commit()
    logger.info("Student %s deleted", student_id)
    return {"success": True}
