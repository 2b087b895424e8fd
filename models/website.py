from sqlalchemy import Column, Integer, String, Date, DateTime
from database import Base
from datetime import datetime

# Notice Board
class Notice(Base):
    __tablename__ = "notices"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    file = Column(String(255), nullable=True)  # /uploads/... (pdf or image)
    created_at = Column(DateTime, default=datetime.now, index=True)

# Photo Gallery
class GalleryItem(Base):
    __tablename__ = "gallery"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    img = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now, index=True)

# Visitor counter, one row per day
class VisitorCount(Base):
    __tablename__ = "visitors"
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, unique=True, nullable=False)
    count = Column(Integer, default=0, nullable=False)
