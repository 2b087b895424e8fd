from sqlalchemy import Column, Integer, String, Date, DateTime, UniqueConstraint
from database import Base
from datetime import datetime

class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(10), unique=True, index=True)  # public 5-digit id
    name = Column(String(100), nullable=False)
    birth_reg = Column(String(50), nullable=False)

    # --- ACADEMIC INFO ---
    class_name = Column(String(50), nullable=False, index=True)
    year = Column(String(10), nullable=False)
    roll = Column(String(20), nullable=True)
    section = Column(String(20), nullable=True)
    shift = Column(String(20), nullable=True)
    group = Column(String(30), nullable=True)

    # --- PARENTS INFO ---
    father_name = Column(String(100), nullable=True)
    mother_name = Column(String(100), nullable=True)
    mobile_number = Column(String(20), nullable=True)

    # --- PERSONAL INFO ---
    dob = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    address = Column(String(255), nullable=True)
    photo = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (
        UniqueConstraint("birth_reg", "class_name", "year", name="uq_student_enrolment"),
    )
