"""
Base schema shared by request and response models.
"""
from pydantic import BaseModel, ConfigDict
from typing import Type, TypeVar, Any

T = TypeVar('T', bound='BaseSchema')

class BaseSchema(BaseModel):
    """Reads attributes off ORM rows (or any object) and accepts field names or aliases"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )

    @classmethod
    def from_orm_model(cls: Type[T], orm_model: Any) -> T:
        """Build the schema from a SQLAlchemy row or a row-like test double"""
        return cls.model_validate(orm_model)
