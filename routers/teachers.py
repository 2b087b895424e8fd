import logging
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, Form, File, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from exceptions import NotFoundError
from models.teachers import Teacher
from security import verify_admin
from services.storage import save_upload, delete_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teachers", tags=["Teachers"])

TEXT_FIELDS = ("name", "designation", "subject", "qualification", "phone", "email")


def serialize_teacher(t: Teacher) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "designation": t.designation,
        "subject": t.subject,
        "qualification": t.qualification,
        "phone": t.phone,
        "email": t.email,
        "photo": t.photo,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


def get_teacher_or_404(db: Session, id: int) -> Teacher:
    teacher = db.query(Teacher).filter(Teacher.id == id).first()
    if not teacher:
        raise NotFoundError("Teacher", details={"id": id})
    return teacher


# --- Admin API: Add Teacher (photo optional) ---
@router.post("")
async def add_teacher(
    name: str = Form(...),
    designation: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    qualification: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: dict = Depends(verify_admin),
):
    photo_path = save_upload(photo) if photo and photo.filename else None

    new_teacher = Teacher(
        name=name,
        designation=designation,
        subject=subject,
        qualification=qualification,
        phone=phone,
        email=email,
        photo=photo_path,
    )
    db.add(new_teacher)
    db.commit()
    db.refresh(new_teacher)

    logger.info("Teacher %s added", new_teacher.id)
    return {"success": True, "insertedId": new_teacher.id}


# --- Public API: Teachers List ---
@router.get("")
def list_teachers(db: Session = Depends(get_db)):
    teachers = db.query(Teacher).order_by(Teacher.id.asc()).all()
    return [serialize_teacher(t) for t in teachers]


# --- Public API: One Teacher ---
@router.get("/{id}")
def get_teacher(id: int, db: Session = Depends(get_db)):
    return serialize_teacher(get_teacher_or_404(db, id))


# --- Admin API: Update Teacher (only sent fields change) ---
@router.put("/{id}")
async def update_teacher(
    id: int,
    name: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    qualification: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: dict = Depends(verify_admin),
):
    teacher = get_teacher_or_404(db, id)

    values = {
        "name": name, "designation": designation, "subject": subject,
        "qualification": qualification, "phone": phone, "email": email,
    }
    for field in TEXT_FIELDS:
        if values[field] is not None:
            setattr(teacher, field, values[field])

    if photo and photo.filename:
        old_photo = teacher.photo
        teacher.photo = save_upload(photo)
        delete_upload(old_photo)

    db.commit()
    db.refresh(teacher)
    return {"success": True, "data": serialize_teacher(teacher)}


# --- Admin API: Delete Teacher ---
@router.delete("/{id}")
def delete_teacher(id: int, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    teacher = get_teacher_or_404(db, id)
    photo = teacher.photo

    db.delete(teacher)
    db.commit()
    delete_upload(photo)

    logger.info("Teacher %s deleted", id)
    return {"success": True, "deletedCount": 1}
