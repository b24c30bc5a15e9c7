"""
Category tree management.

Roots sit at level 0; a child's level is its parent's level + 1. Sellers
may only add subcategories directly under a root and may only edit
categories they created. Deletion is soft (is_active = False).
"""
import logging
from typing import Optional, List, Dict, Any
from fastapi import Request
from sqlalchemy.orm import Session
from app.models.category import Category
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryUpdate, category_to_dict
from app.utils.activity import log_activity
from app.utils.exceptions import ValidationError, NotFoundError, AuthorizationError, InvalidStateError
from app.utils.slug import generate_slug, make_unique_slug

logger = logging.getLogger(__name__)

ADMIN_ONLY_FIELDS = ("is_featured", "is_active")
REQUIRED_FIELDS = ("name", "display_order", "is_featured", "is_active")


def _ordered(query):
    return query.order_by(Category.display_order.asc(), Category.name.asc())


def list_categories(
    db: Session,
    level: Optional[int] = None,
    parent_id: Optional[str] = None,
    featured: Optional[bool] = None
) -> List[Category]:
    query = db.query(Category).filter(Category.is_active == True)
    if level is not None:
        query = query.filter(Category.level == level)
    if parent_id:
        query = query.filter(Category.parent_id == parent_id)
    if featured is not None:
        query = query.filter(Category.is_featured == featured)
    return _ordered(query).all()


def get_main_categories(db: Session) -> List[Category]:
    return list_categories(db, level=0)


def build_tree(categories: List[Category], parent_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Nest ``categories`` under their parents starting at ``parent_id``.
    Nodes whose parent is not in the list are dropped along with their subtree.
    """
    by_parent: Dict[Optional[str], List[Category]] = {}
    for category in categories:
        by_parent.setdefault(category.parent_id, []).append(category)

    def children_of(node_id):
        nodes = sorted(by_parent.get(node_id, []), key=lambda c: (c.display_order, c.name))
        result = []
        for node in nodes:
            item = category_to_dict(node)
            item["children"] = children_of(node.id)
            result.append(item)
        return result

    return children_of(parent_id)


def get_category_tree(db: Session) -> List[Dict[str, Any]]:
    categories = db.query(Category).filter(Category.is_active == True).all()
    return build_tree(categories)


def get_category(db: Session, category_id: str) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def get_category_by_slug(db: Session, slug: str) -> Category:
    category = db.query(Category).filter(Category.slug == slug, Category.is_active == True).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def _unique_slug(db: Session, name: str, exclude_id: Optional[str] = None) -> str:
    base = generate_slug(name)
    query = db.query(Category.slug).filter(Category.slug.like(f"{base}%"))
    if exclude_id:
        query = query.filter(Category.id != exclude_id)
    return make_unique_slug(base, (row.slug for row in query.all()))


def _resolve_parent(db: Session, parent_id) -> Optional[Category]:
    if parent_id is None:
        return None
    parent = db.query(Category).filter(Category.id == str(parent_id)).first()
    if not parent:
        raise NotFoundError("Parent category not found")
    if not parent.is_active:
        raise ValidationError("Parent category is inactive")
    return parent


def _check_seller_parent(user: User, parent: Optional[Category]) -> None:
    if user.is_admin:
        return
    if parent is None or parent.level != 0:
        raise AuthorizationError("Sellers can only create subcategories under main categories")


def _ensure_no_active_children(category: Category, action: str) -> None:
    active_children = [child for child in category.children if child.is_active]
    if active_children:
        raise InvalidStateError(
            f"Cannot {action} category with active subcategories",
            details={"children": [child.id for child in active_children]}
        )


def _relevel_subtree(category: Category) -> None:
    for child in category.children:
        child.level = category.level + 1
        _relevel_subtree(child)


def create_category(
    db: Session,
    data: CategoryCreate,
    user: User,
    request: Optional[Request] = None
) -> Category:
    parent = _resolve_parent(db, data.parent_id)
    _check_seller_parent(user, parent)

    fields = data.model_dump(exclude={"parent_id"})
    if not user.is_admin:
        fields["is_featured"] = False

    category = Category(
        **fields,
        slug=_unique_slug(db, data.name),
        parent_id=parent.id if parent else None,
        level=parent.level + 1 if parent else 0,
        is_active=True,
        created_by=user.id,
        updated_by=user.id
    )
    db.add(category)
    db.flush()

    log_activity(
        db,
        actor_id=user.id,
        action="category_created",
        entity_type="category",
        entity_id=category.id,
        details={"name": category.name, "parentId": category.parent_id},
        request=request
    )
    db.commit()
    db.refresh(category)

    logger.info(f"Category '{category.name}' ({category.slug}) created by {user.id}")
    return category


def update_category(
    db: Session,
    category_id: str,
    data: CategoryUpdate,
    user: User,
    request: Optional[Request] = None
) -> Category:
    category = get_category(db, category_id)

    if not user.is_admin and category.created_by != user.id:
        raise AuthorizationError("You can only update categories you created")

    changes = data.model_dump(exclude_unset=True)
    if not user.is_admin:
        blocked = [field for field in ADMIN_ONLY_FIELDS if field in changes]
        if blocked:
            raise AuthorizationError("Only admins can change featured or active flags", details=blocked)

    if "parent_id" in changes:
        new_parent_id = changes.pop("parent_id")
        new_parent_id = str(new_parent_id) if new_parent_id is not None else None
        if new_parent_id != category.parent_id:
            parent = _resolve_parent(db, new_parent_id)
            _check_seller_parent(user, parent)

            # Walk up from the new parent; meeting this category means a cycle
            ancestor = parent
            while ancestor is not None:
                if ancestor.id == category.id:
                    raise ValidationError("Category cannot be moved under itself or its descendants")
                ancestor = ancestor.parent

            category.parent_id = parent.id if parent else None
            category.parent = parent
            category.level = parent.level + 1 if parent else 0
            _relevel_subtree(category)

    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            changes.pop(field)

    if changes.get("is_active") is False and category.is_active:
        _ensure_no_active_children(category, "deactivate")
    if changes.get("is_active") is True and not category.is_active:
        if category.parent is not None and not category.parent.is_active:
            raise InvalidStateError(
                "Cannot activate a category whose parent is inactive",
                details={"parentId": category.parent_id}
            )

    if changes.get("name") and changes["name"] != category.name:
        category.slug = _unique_slug(db, changes["name"], exclude_id=category.id)

    for field, value in changes.items():
        setattr(category, field, value)
    category.updated_by = user.id

    log_activity(
        db,
        actor_id=user.id,
        action="category_updated",
        entity_type="category",
        entity_id=category.id,
        details={"fields": sorted(data.model_dump(exclude_unset=True).keys())},
        request=request
    )
    db.commit()
    db.refresh(category)

    logger.info(f"Category {category.id} updated by {user.id}")
    return category


def delete_category(
    db: Session,
    category_id: str,
    user: User,
    request: Optional[Request] = None
) -> Category:
    category = get_category(db, category_id)
    if not category.is_active:
        raise InvalidStateError("Category is already inactive")

    _ensure_no_active_children(category, "delete")

    category.is_active = False
    category.updated_by = user.id
    log_activity(
        db,
        actor_id=user.id,
        action="category_deleted",
        entity_type="category",
        entity_id=category.id,
        details={"name": category.name},
        request=request
    )
    db.commit()
    db.refresh(category)

    logger.info(f"Category {category.id} soft-deleted by {user.id}")
    return category
