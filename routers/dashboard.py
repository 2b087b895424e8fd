from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.results import ResultRecord
from models.students import Student
from models.teachers import Teacher
from models.website import VisitorCount

router = APIRouter(tags=["Dashboard"])


def total_visitors(db: Session) -> int:
    return int(db.query(func.coalesce(func.sum(VisitorCount.count), 0)).scalar() or 0)


def _bump_today(db: Session, today: date) -> int:
    return db.query(VisitorCount).filter(VisitorCount.date == today).update(
        {VisitorCount.count: VisitorCount.count + 1}, synchronize_session=False
    )


# ===============================
#  1. VISITOR COUNTER (Public)
# ===============================
@router.post("/visitors")
def increment_visitors(db: Session = Depends(get_db)):
    today = date.today()

    if not _bump_today(db, today):
        db.add(VisitorCount(date=today, count=1))
    try:
        db.commit()
    except IntegrityError:
        # another request created today's row first
        db.rollback()
        _bump_today(db, today)
        db.commit()

    return {"success": True, "total": total_visitors(db)}


@router.get("/visitors")
def get_visitors(db: Session = Depends(get_db)):
    return {"success": True, "total": total_visitors(db)}


# ===============================
#  2. DASHBOARD STATS
# ===============================
@router.get("/dashboard/stats")
def dashboard_stats(db: Session = Depends(get_db)):
    # 1. Basic Counts
    total_students = db.query(Student).count()
    total_teachers = db.query(Teacher).count()
    total_results = db.query(ResultRecord).count()

    # 2. Gender wise
    gender_rows = db.query(Student.gender, func.count(Student.id)).group_by(Student.gender).all()
    gender_wise = [{"gender": gender, "count": count} for gender, count in gender_rows]

    # 3. Class wise
    class_rows = db.query(Student.class_name, func.count(Student.id))\
        .group_by(Student.class_name).order_by(Student.class_name.asc()).all()
    class_wise = [{"class": class_name, "students": count} for class_name, count in class_rows]

    return {
        "success": True,
        "stats": {
            "totalStudents": total_students,
            "totalTeachers": total_teachers,
            "totalResults": total_results,
            "genderWise": gender_wise,
            "classWise": class_wise,
        }
    }
