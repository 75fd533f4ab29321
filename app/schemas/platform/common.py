from typing import Optional

from pydantic import BaseModel


class ListingResult(BaseModel):
    """Outcome of a create-listing call on a marketplace"""
    success: bool
    external_id: Optional[str] = None
    error: Optional[str] = None
