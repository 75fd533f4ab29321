"""
Schemas for category and attribute mappings.
"""
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from app.schemas.base import BaseSchema


class CategoryMappingBase(BaseSchema):
    source_category: str
    target_category: str
    target_subject_id: Optional[int] = None
    source_category_id: Optional[int] = None


class CategoryMappingCreate(CategoryMappingBase):
    @field_validator('source_category', 'target_category')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Category names must not be empty')
        return v.strip()


class CategoryMappingRead(CategoryMappingBase):
    id: int
    created_at: Optional[datetime] = None


class AttributeMappingBase(BaseSchema):
    source_attribute_id: str
    source_attribute_name: str = ""
    target_attribute_id: str
    target_attribute_name: str = ""
    category_id: Optional[int] = None


class AttributeMappingCreate(AttributeMappingBase):
    @field_validator('source_attribute_id', 'source_attribute_name', 'target_attribute_id', 'target_attribute_name')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Attribute ids and names must not be empty')
        return v


class AttributeMappingUpdate(BaseSchema):
    source_attribute_id: Optional[str] = None
    source_attribute_name: Optional[str] = None
    target_attribute_id: Optional[str] = None
    target_attribute_name: Optional[str] = None
    category_id: Optional[int] = None


# Auto-created mappings may still have an empty name until backfilled
class AttributeMappingRead(AttributeMappingBase):
    id: int
    created_at: Optional[datetime] = None
