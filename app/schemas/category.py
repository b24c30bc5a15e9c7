"""
Category Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[UUID] = Field(None, alias="parentId")
    display_order: int = Field(default=0, ge=0, alias="displayOrder")
    is_featured: bool = Field(default=False, alias="isFeatured")
    icon: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    meta_title: Optional[str] = Field(None, max_length=60, alias="metaTitle")
    meta_description: Optional[str] = Field(None, max_length=160, alias="metaDescription")

    class Config:
        populate_by_name = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[UUID] = Field(None, alias="parentId")
    display_order: Optional[int] = Field(None, ge=0, alias="displayOrder")
    is_featured: Optional[bool] = Field(None, alias="isFeatured")
    is_active: Optional[bool] = Field(None, alias="isActive")
    icon: Optional[str] = Field(None, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    meta_title: Optional[str] = Field(None, max_length=60, alias="metaTitle")
    meta_description: Optional[str] = Field(None, max_length=160, alias="metaDescription")

    class Config:
        populate_by_name = True


def category_to_dict(category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "parentId": category.parent_id,
        "level": category.level,
        "displayOrder": category.display_order,
        "isActive": category.is_active,
        "isFeatured": category.is_featured,
        "icon": category.icon,
        "image": category.image,
        "metaTitle": category.meta_title,
        "metaDescription": category.meta_description,
        "createdAt": category.created_at.isoformat() if category.created_at else None,
        "updatedAt": category.updated_at.isoformat() if category.updated_at else None,
    }
