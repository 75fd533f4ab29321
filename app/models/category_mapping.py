# app/models/category_mapping.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base


class CategoryMapping(Base):
    """Correspondence between one source (Ozon) category label and one target (Wildberries) label"""
    __tablename__ = "category_mappings"

    id = Column(Integer, primary_key=True)
    source_category = Column(String, nullable=False, unique=True)
    target_category = Column(String, nullable=False, index=True)
    target_subject_id = Column(Integer)  # Wildberries subjectID
    source_category_id = Column(Integer)  # Ozon category id

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<CategoryMapping(id={self.id}, {self.source_category!r} -> {self.target_category!r})>"
