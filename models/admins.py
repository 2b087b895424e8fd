from sqlalchemy import Column, Integer, String, DateTime
from database import Base
from datetime import datetime

class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(120), unique=True, index=True, nullable=False)
    password = Column(String(100), nullable=False)  # bcrypt hash
    role = Column(String(20), default="admin")
    created_at = Column(DateTime, default=datetime.now)
