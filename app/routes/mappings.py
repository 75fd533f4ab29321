import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_storage
from app.schemas.mapping import (
    AttributeMappingCreate,
    AttributeMappingRead,
    AttributeMappingUpdate,
    CategoryMappingCreate,
    CategoryMappingRead,
)
from app.services.mapping import CategoryResolver
from app.services.storage import MappingStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["mappings"])


# Category mappings

@router.get("/category-mappings", response_model=List[CategoryMappingRead])
async def list_category_mappings(storage: MappingStorage = Depends(get_storage)):
    return await storage.get_all_category_mappings()


@router.post("/category-mappings", response_model=CategoryMappingRead)
async def save_category_mapping(payload: CategoryMappingCreate, storage: MappingStorage = Depends(get_storage)):
    """Create the mapping for source_category, or update the existing one"""
    return await CategoryResolver(storage).upsert(
        payload.source_category,
        payload.target_category,
        target_subject_id=payload.target_subject_id,
        source_category_id=payload.source_category_id,
    )


@router.delete("/category-mappings/{mapping_id}")
async def delete_category_mapping(mapping_id: int, storage: MappingStorage = Depends(get_storage)):
    if not await storage.delete_category_mapping(mapping_id):
        raise HTTPException(status_code=404, detail="Category mapping not found")
    return {"success": True}


# Attribute mappings

async def _check_category(storage: MappingStorage, category_id: Optional[int]) -> None:
    if category_id is not None and await storage.get_category_mapping_by_id(category_id) is None:
        raise HTTPException(status_code=400, detail=f"Category mapping {category_id} does not exist")


@router.get("/attribute-mappings", response_model=List[AttributeMappingRead])
async def list_attribute_mappings(
    category_id: Optional[int] = None,
    storage: MappingStorage = Depends(get_storage),
):
    if category_id is not None:
        return await storage.get_attribute_mappings_by_category(category_id)
    return await storage.get_all_attribute_mappings()


@router.post("/attribute-mappings", response_model=AttributeMappingRead, status_code=201)
async def create_attribute_mapping(payload: AttributeMappingCreate, storage: MappingStorage = Depends(get_storage)):
    """Returns the existing row if the attribute is already mapped in that scope"""
    await _check_category(storage, payload.category_id)
    return await storage.create_attribute_mapping(payload.model_dump())


@router.put("/attribute-mappings/{mapping_id}", response_model=AttributeMappingRead)
async def update_attribute_mapping(
    mapping_id: int,
    payload: AttributeMappingUpdate,
    storage: MappingStorage = Depends(get_storage),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="Nothing to update")
    await _check_category(storage, data.get("category_id"))

    mapping = await storage.update_attribute_mapping(mapping_id, data)
    if mapping is None:
        raise HTTPException(status_code=404, detail="Attribute mapping not found")
    return mapping


@router.delete("/attribute-mappings/{mapping_id}")
async def delete_attribute_mapping(mapping_id: int, storage: MappingStorage = Depends(get_storage)):
    if not await storage.delete_attribute_mapping(mapping_id):
        raise HTTPException(status_code=404, detail="Attribute mapping not found")
    return {"success": True}
