import hashlib
import hmac
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import Base, get_db
from app.main import app
from app.models.user import User, UserRole
from app.services.auth_service import create_tokens
from app.services.razorpay_service import RazorpayClient, get_gateway
from app.utils.security import get_password_hash

TEST_GATEWAY_SECRET = "test_secret"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# One hash for every fixture user keeps bcrypt out of the hot path
PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


def sign(order_id: str, payment_id: str, secret: str = TEST_GATEWAY_SECRET) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_tokens(user)['token']}"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway():
    # No key id: orders are mocked locally, signatures are checked for real
    return RazorpayClient(key_id="", key_secret=TEST_GATEWAY_SECRET)


@pytest.fixture
def client(db, gateway):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, email: str, role: UserRole = UserRole.CUSTOMER, name: str = "Test User") -> User:
    user = User(name=name, email=email, phone="9876543210", password_hash=PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def customer(db):
    return make_user(db, "applicant@example.com", name="Asha Applicant")


@pytest.fixture
def other_customer(db):
    return make_user(db, "other@example.com", name="Omar Other")


@pytest.fixture
def seller(db):
    return make_user(db, "seller@example.com", role=UserRole.SELLER, name="Sam Seller")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN, name="Ada Admin")


@pytest.fixture
def application_data():
    """Service-level application fields (snake_case)"""
    return {
        "business_name": "Asha Electronics",
        "business_type": "Individual/Proprietorship",
        "business_category": "Electronics & Gadgets",
        "business_description": "Retailer of phones, chargers and small gadgets.",
        "business_email": "shop@ashaelectronics.in",
        "business_phone": "+91 98765 43210",
        "business_address": "12 MG Road, Near City Mall",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
        "pan_number": "ABCDE1234F",
        "gst_number": "27ABCDE1234F1Z5",
        "bank_account_number": "123456789012",
        "bank_name": "State Bank of India",
        "bank_ifsc": "SBIN0001234",
        "account_holder_name": "Asha Kulkarni",
        "agree_to_terms": True,
    }


@pytest.fixture
def application_payload():
    """Request body for POST /seller/apply (camelCase)"""
    return {
        "businessName": "Asha Electronics",
        "businessType": "Individual/Proprietorship",
        "businessCategory": "Electronics & Gadgets",
        "businessDescription": "Retailer of phones, chargers and small gadgets.",
        "businessEmail": "shop@ashaelectronics.in",
        "businessPhone": "+91 98765 43210",
        "businessAddress": "12 MG Road, Near City Mall",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
        "panNumber": "abcde1234f",
        "gstNumber": "",
        "bankAccountNumber": "123456789012",
        "bankName": "State Bank of India",
        "bankIFSC": "SBIN0001234",
        "accountHolderName": "Asha Kulkarni",
        "productCategories": ["Mobiles"],
        "agreeToTerms": True,
    }
