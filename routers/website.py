import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, File, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from exceptions import NotFoundError, InvalidUploadError
from models.website import Notice, GalleryItem
from security import verify_admin
from services.storage import save_upload, delete_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Website CMS"])


# ===============================
#  1. NOTICE APIs
# ===============================

# --- Admin API: Add Notice (attachment optional) ---
@router.post("/notices")
async def add_notice(
    title: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: dict = Depends(verify_admin),
):
    if not title or not title.strip():
        raise InvalidUploadError("Title is required")

    file_path = save_upload(file) if file and file.filename else None

    new_notice = Notice(title=title.strip(), file=file_path)
    db.add(new_notice)
    db.commit()
    db.refresh(new_notice)

    logger.info("Notice %s published", new_notice.id)
    return {
        "success": True,
        "insertedId": new_notice.id,
        "notice": {
            "id": new_notice.id,
            "title": new_notice.title,
            "file": new_notice.file,
            "createdAt": new_notice.created_at.isoformat(),
        },
    }


# --- Public API: Notices, newest first ---
@router.get("/notices")
def get_notices(db: Session = Depends(get_db)):
    notices = db.query(Notice).order_by(Notice.created_at.desc(), Notice.id.desc()).all()
    return [
        {
            "id": n.id,
            "title": n.title,
            "file": n.file,
            "createdAt": n.created_at.isoformat() if n.created_at else None,
        }
        for n in notices
    ]


# --- Admin API: Delete Notice (and its file) ---
@router.delete("/notices/{id}")
def delete_notice(id: int, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    notice = db.query(Notice).filter(Notice.id == id).first()
    if not notice:
        raise NotFoundError("Notice", details={"id": id})

    file_path = notice.file
    db.delete(notice)
    db.commit()
    delete_upload(file_path)

    return {"success": True, "deletedCount": 1}


# ===============================
#  2. GALLERY APIs
# ===============================

# --- Admin API: Upload Photo ---
@router.post("/gallery")
async def add_gallery_image(
    title: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: dict = Depends(verify_admin),
):
    if not title or not title.strip() or not file or not file.filename:
        raise InvalidUploadError("Title and Image required")

    new_img = GalleryItem(title=title.strip(), img=save_upload(file))
    db.add(new_img)
    db.commit()
    db.refresh(new_img)

    return {
        "success": True,
        "insertedId": new_img.id,
        "data": {
            "id": new_img.id,
            "title": new_img.title,
            "img": new_img.img,
            "createdAt": new_img.created_at.isoformat(),
        },
    }


# --- Public API: All Photos, newest first ---
@router.get("/gallery")
def get_gallery_images(db: Session = Depends(get_db)):
    images = db.query(GalleryItem).order_by(GalleryItem.created_at.desc(), GalleryItem.id.desc()).all()
    return [
        {
            "id": img.id,
            "title": img.title,
            "img": img.img,
            "createdAt": img.created_at.isoformat() if img.created_at else None,
        }
        for img in images
    ]


# --- Admin API: Delete Photo ---
@router.delete("/gallery/{id}")
def delete_gallery_image(id: int, db: Session = Depends(get_db), user: dict = Depends(verify_admin)):
    img = db.query(GalleryItem).filter(GalleryItem.id == id).first()
    if not img:
        raise NotFoundError("Image", details={"id": id})

    img_path = img.img
    db.delete(img)
    db.commit()
    delete_upload(img_path)

    return {"success": True, "deletedCount": 1}
