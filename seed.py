import logging

from sqlalchemy.orm import Session

from config import settings
from database import Database
from logging_config import setup_logging
from models.admins import Admin
from security import get_password_hash

logger = logging.getLogger(__name__)


def seed_admin(db: Session, email: str, password: str, role: str = "admin") -> Admin:
    """Create the admin account, or reset its password and role if it exists"""
    admin = db.query(Admin).filter(Admin.email == email).first()
    if admin:
        admin.password = get_password_hash(password)
        admin.role = role
        logger.info("Admin %s exists, password reset", email)
    else:
        admin = Admin(email=email, password=get_password_hash(password), role=role)
        db.add(admin)
        logger.info("Admin %s created", email)

    db.commit()
    db.refresh(admin)
    return admin


def main():
    setup_logging()
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        raise SystemExit("Set ADMIN_EMAIL and ADMIN_PASSWORD (env or .env) first")

    database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
    database.connect()
    db = database.session()
    try:
        seed_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_ROLE)
    finally:
        db.close()
        database.close()


if __name__ == "__main__":
    main()
