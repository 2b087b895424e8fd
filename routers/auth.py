import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel

from database import get_db
from exceptions import AuthenticationError
from models.admins import Admin
from security import verify_password, create_access_token, verify_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

# ✅ Login Data Model
class LoginSchema(BaseModel):
    email: str
    password: str


# 1. Login (POST) -> JWT for the admin panel
@router.post("/login")
def admin_login(data: LoginSchema, db: Session = Depends(get_db)):
    admin = db.query(Admin).filter(Admin.email == data.email).first()

    # same message for unknown email and wrong password
    if not admin or not verify_password(data.password, admin.password):
        logger.info("Failed admin login for %s", data.email)
        raise AuthenticationError("Invalid credentials")

    token = create_access_token({"email": admin.email, "role": admin.role})
    logger.info("Admin %s logged in", admin.email)
    return {"success": True, "token": token, "role": admin.role}


# 2. Dashboard check (token required)
@router.get("/dashboard")
def admin_dashboard(user: Dict[str, Any] = Depends(verify_admin)):
    return {"success": True, "message": "Welcome to Admin Dashboard", "user": user}
