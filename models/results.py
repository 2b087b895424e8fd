from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from database import Base
from datetime import datetime

class ResultRecord(Base):
    __tablename__ = "results"

    id = Column(Integer, primary_key=True, index=True)
    roll = Column(String(20), nullable=False, index=True)
    student_name = Column(String(100), nullable=False)
    class_name = Column(String(50), nullable=False)
    exam_type = Column(String(50), nullable=False)    # e.g. "half-yearly", "final"
    year = Column(Integer, nullable=False)

    # {"Math": {"written": 40, "mcq": 20}, "English": {"written": 55}}
    marks = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # one result per roll per class/exam/year
    __table_args__ = (
        UniqueConstraint("roll", "class_name", "exam_type", "year", name="uq_result_key"),
    )
