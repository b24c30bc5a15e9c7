from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.category import CategoryCreate, CategoryUpdate, category_to_dict
from app.schemas.common import ResponseModel
from app.models.user import User
from app.api.deps import require_admin, require_seller_or_admin
from app.services import category_service

router = APIRouter()


@router.get("", response_model=ResponseModel)
def get_categories(
    level: Optional[int] = Query(None, ge=0),
    parent: Optional[str] = None,
    featured: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    """Active categories, optionally filtered by level, parent or featured flag"""
    categories = category_service.list_categories(db, level=level, parent_id=parent, featured=featured)
    return ResponseModel(success=True, data=[category_to_dict(c) for c in categories])


@router.get("/tree", response_model=ResponseModel)
def get_category_tree(db: Session = Depends(get_db)):
    return ResponseModel(success=True, data=category_service.get_category_tree(db))


@router.get("/main", response_model=ResponseModel)
def get_main_categories(
    current_user: User = Depends(require_seller_or_admin),
    db: Session = Depends(get_db)
):
    """Root categories that sellers may add subcategories under"""
    categories = category_service.get_main_categories(db)
    return ResponseModel(success=True, data=[category_to_dict(c) for c in categories])


@router.get("/slug/{slug}", response_model=ResponseModel)
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    category = category_service.get_category_by_slug(db, slug)
    return ResponseModel(success=True, data=category_to_dict(category))


@router.get("/{category_id}", response_model=ResponseModel)
def get_category(category_id: str, db: Session = Depends(get_db)):
    category = category_service.get_category(db, category_id)
    data = category_to_dict(category)
    data["children"] = [category_to_dict(c) for c in category.children if c.is_active]
    return ResponseModel(success=True, data=data)


@router.post("", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    request: Request,
    current_user: User = Depends(require_seller_or_admin),
    db: Session = Depends(get_db)
):
    category = category_service.create_category(db, category_data, current_user, request=request)
    return ResponseModel(
        success=True,
        data=category_to_dict(category),
        message="Category created successfully"
    )


@router.put("/{category_id}", response_model=ResponseModel)
def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    request: Request,
    current_user: User = Depends(require_seller_or_admin),
    db: Session = Depends(get_db)
):
    category = category_service.update_category(db, category_id, category_data, current_user, request=request)
    return ResponseModel(
        success=True,
        data=category_to_dict(category),
        message="Category updated successfully"
    )


@router.delete("/{category_id}", response_model=ResponseModel)
def delete_category(
    category_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft delete: the category is deactivated, not removed"""
    category_service.delete_category(db, category_id, admin, request=request)
    return ResponseModel(success=True, message="Category deleted successfully")
