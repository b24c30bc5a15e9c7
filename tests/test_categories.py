import pytest
from app.models.activity_log import ActivityLog
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services import category_service as service
from app.utils.exceptions import AuthorizationError, InvalidStateError, ValidationError
from conftest import auth_header


def create(db, user, name, parent=None, **kwargs):
    data = CategoryCreate(name=name, parent_id=parent.id if parent else None, **kwargs)
    return service.create_category(db, data, user)


@pytest.fixture
def electronics(db, admin):
    return create(db, admin, "Electronics", display_order=1)


def test_admin_creates_root_and_children(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)
    cases = create(db, admin, "Phone Cases", parent=phones)

    assert electronics.level == 0
    assert electronics.slug == "electronics"
    assert phones.level == 1
    assert cases.level == 2
    assert db.query(ActivityLog).filter(ActivityLog.action == "category_created").count() == 3


def test_slugs_are_made_unique(db, admin):
    first = create(db, admin, "Home & Kitchen")
    second = create(db, admin, "Home & Kitchen")

    assert first.slug == "home-kitchen"
    assert second.slug == "home-kitchen-1"


def test_seller_only_creates_under_roots(db, seller, admin, electronics):
    with pytest.raises(AuthorizationError):
        create(db, seller, "My Root")

    phones = create(db, seller, "Phones", parent=electronics, is_featured=True)
    assert phones.level == 1
    assert phones.created_by == seller.id
    assert phones.is_featured is False

    with pytest.raises(AuthorizationError):
        create(db, seller, "Too Deep", parent=phones)


def test_tree_is_nested_and_ordered(db, admin, electronics):
    fashion = create(db, admin, "Fashion", display_order=0)
    create(db, admin, "Tablets", parent=electronics)
    create(db, admin, "Laptops", parent=electronics)
    hidden = create(db, admin, "Hidden", parent=fashion)
    service.delete_category(db, hidden.id, admin)

    tree = service.get_category_tree(db)

    assert [node["name"] for node in tree] == ["Fashion", "Electronics"]
    assert tree[0]["children"] == []
    assert [child["name"] for child in tree[1]["children"]] == ["Laptops", "Tablets"]
    assert tree[1]["children"][0]["children"] == []


def test_update_rejects_cycles(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)

    with pytest.raises(ValidationError):
        service.update_category(db, electronics.id, CategoryUpdate(parent_id=phones.id), admin)
    with pytest.raises(ValidationError):
        service.update_category(db, electronics.id, CategoryUpdate(parent_id=electronics.id), admin)


def test_reparenting_relevels_subtree(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)
    cases = create(db, admin, "Cases", parent=phones)
    gadgets = create(db, admin, "Gadgets")

    service.update_category(db, electronics.id, CategoryUpdate(parent_id=gadgets.id), admin)
    db.refresh(phones)
    db.refresh(cases)
    assert electronics.level == 1
    assert phones.level == 2
    assert cases.level == 3

    # Explicit null moves back to the root
    service.update_category(db, electronics.id, CategoryUpdate(parent_id=None), admin)
    db.refresh(cases)
    assert electronics.parent_id is None
    assert electronics.level == 0
    assert cases.level == 2


def test_update_renames_and_reslugs(db, admin, electronics):
    updated = service.update_category(db, electronics.id, CategoryUpdate(name="Consumer Electronics"), admin)
    assert updated.slug == "consumer-electronics"


def test_seller_update_rules(db, admin, seller, electronics):
    own = create(db, seller, "Phones", parent=electronics)

    renamed = service.update_category(db, own.id, CategoryUpdate(description="Smartphones"), seller)
    assert renamed.description == "Smartphones"

    with pytest.raises(AuthorizationError):
        service.update_category(db, own.id, CategoryUpdate(is_featured=True), seller)
    with pytest.raises(AuthorizationError):
        service.update_category(db, electronics.id, CategoryUpdate(description="Mine now"), seller)


def test_delete_is_soft_and_blocked_by_active_children(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)

    with pytest.raises(InvalidStateError):
        service.delete_category(db, electronics.id, admin)

    service.delete_category(db, phones.id, admin)
    deleted = service.delete_category(db, electronics.id, admin)

    assert deleted.is_active is False
    assert service.get_category(db, electronics.id).id == electronics.id
    assert service.list_categories(db) == []
    with pytest.raises(InvalidStateError):
        service.delete_category(db, electronics.id, admin)


def test_category_endpoints(client, db, admin, seller, customer, electronics):
    create(db, admin, "Phones", parent=electronics, is_featured=True)

    response = client.get("/api/v1/categories/tree")
    assert response.status_code == 200
    assert response.json()["data"][0]["children"][0]["name"] == "Phones"

    response = client.get("/api/v1/categories", params={"featured": "true"})
    assert [c["name"] for c in response.json()["data"]] == ["Phones"]

    response = client.get("/api/v1/categories/slug/electronics")
    assert response.json()["data"]["id"] == electronics.id

    assert client.get("/api/v1/categories/main").status_code == 401
    assert client.get("/api/v1/categories/main", headers=auth_header(customer)).status_code == 403
    response = client.get("/api/v1/categories/main", headers=auth_header(seller))
    assert [c["name"] for c in response.json()["data"]] == ["Electronics"]

    response = client.post(
        "/api/v1/categories",
        json={"name": "Wearables", "parentId": electronics.id},
        headers=auth_header(seller)
    )
    assert response.status_code == 201
    assert response.json()["data"]["level"] == 1

    response = client.delete(f"/api/v1/categories/{electronics.id}", headers=auth_header(seller))
    assert response.status_code == 403

    response = client.delete(f"/api/v1/categories/{electronics.id}", headers=auth_header(admin))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE"

    assert client.get("/api/v1/categories/missing-id").status_code == 404


def test_deactivate_via_update_is_blocked_by_active_children(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)

    with pytest.raises(InvalidStateError):
        service.update_category(db, electronics.id, CategoryUpdate(is_active=False), admin)
    db.refresh(electronics)
    assert electronics.is_active is True
    assert [node["name"] for node in service.get_category_tree(db)] == ["Electronics"]

    service.update_category(db, phones.id, CategoryUpdate(is_active=False), admin)
    assert service.update_category(db, electronics.id, CategoryUpdate(is_active=False), admin).is_active is False


def test_child_of_inactive_parent_cannot_be_reactivated(db, admin, electronics):
    phones = create(db, admin, "Phones", parent=electronics)
    service.delete_category(db, phones.id, admin)
    service.delete_category(db, electronics.id, admin)

    with pytest.raises(InvalidStateError):
        service.update_category(db, phones.id, CategoryUpdate(is_active=True), admin)

    service.update_category(db, electronics.id, CategoryUpdate(is_active=True), admin)
    assert service.update_category(db, phones.id, CategoryUpdate(is_active=True), admin).is_active is True
