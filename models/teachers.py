from sqlalchemy import Column, Integer, String, DateTime
from database import Base
from datetime import datetime

class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    designation = Column(String(100), nullable=True)   # e.g. "Head Teacher"
    subject = Column(String(100), nullable=True)
    qualification = Column(String(150), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(120), nullable=True)
    photo = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.now)
