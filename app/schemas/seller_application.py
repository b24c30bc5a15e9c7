"""
Seller Application Schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
import re

BUSINESS_TYPES = [
    "Individual/Proprietorship",
    "Partnership",
    "Private Limited Company",
    "Public Limited Company",
    "LLP",
    "Others",
]

BUSINESS_CATEGORIES = [
    "Electronics & Gadgets",
    "Fashion & Apparel",
    "Home & Kitchen",
    "Books & Stationery",
    "Sports & Fitness",
    "Beauty & Personal Care",
    "Automotive",
    "Others",
]

MONTHLY_REVENUE_BANDS = [
    "Less than ₹1 Lakh",
    "₹1-5 Lakhs",
    "₹5-10 Lakhs",
    "₹10-25 Lakhs",
    "₹25-50 Lakhs",
    "More than ₹50 Lakhs",
]

PHONE_PATTERN = r"^[+]?[\d\s\-()]+$"
PINCODE_PATTERN = r"^\d{6}$"
PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"
GST_PATTERN = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$"
IFSC_PATTERN = r"^[A-Z]{4}0[A-Z0-9]{6}$"


class SellerApplicationCreate(BaseModel):
    business_name: str = Field(..., min_length=2, max_length=100)
    business_type: str
    business_category: str
    business_description: str = Field(..., min_length=10, max_length=1000)
    established_year: Optional[int] = Field(None, ge=1900)
    business_email: EmailStr
    business_phone: str
    business_address: str = Field(..., min_length=10, max_length=500)
    city: str = Field(..., min_length=2, max_length=50)
    state: str = Field(..., min_length=2, max_length=50)
    pincode: str
    has_physical_store: bool = False
    store_address: Optional[str] = Field(None, max_length=500)
    pan_number: Optional[str] = None
    gst_number: Optional[str] = None
    bank_account_number: str = Field(..., min_length=5, max_length=25)
    bank_ifsc: Optional[str] = Field(None, alias="bankIFSC")
    bank_name: str = Field(..., min_length=2, max_length=100)
    account_holder_name: str = Field(..., min_length=2, max_length=100)
    expected_monthly_revenue: Optional[str] = None
    product_categories: List[str] = []
    agree_to_terms: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator("business_type")
    @classmethod
    def validate_business_type(cls, v):
        if v not in BUSINESS_TYPES:
            raise ValueError("Invalid business type")
        return v

    @field_validator("business_category")
    @classmethod
    def validate_business_category(cls, v):
        if v not in BUSINESS_CATEGORIES:
            raise ValueError("Invalid business category")
        return v

    @field_validator("established_year")
    @classmethod
    def validate_established_year(cls, v):
        if v is not None and v > datetime.utcnow().year:
            raise ValueError("Invalid established year")
        return v

    @field_validator("business_phone")
    @classmethod
    def validate_phone(cls, v):
        if not re.match(PHONE_PATTERN, v):
            raise ValueError("Invalid business phone number")
        return v

    @field_validator("pincode")
    @classmethod
    def validate_pincode(cls, v):
        if not re.match(PINCODE_PATTERN, v):
            raise ValueError("Invalid pincode")
        return v

    @field_validator("pan_number", "gst_number", "bank_ifsc", mode="before")
    @classmethod
    def normalize_identifier(cls, v):
        # Empty strings from optional form inputs mean "not provided"
        if v is None or not str(v).strip():
            return None
        return str(v).strip().upper()

    @field_validator("pan_number")
    @classmethod
    def validate_pan(cls, v):
        if v is not None and not re.match(PAN_PATTERN, v):
            raise ValueError("Invalid PAN number format")
        return v

    @field_validator("gst_number")
    @classmethod
    def validate_gst(cls, v):
        if v is not None and not re.match(GST_PATTERN, v):
            raise ValueError("Invalid GST number format")
        return v

    @field_validator("bank_ifsc")
    @classmethod
    def validate_ifsc(cls, v):
        if v is not None and not re.match(IFSC_PATTERN, v):
            raise ValueError("Invalid IFSC code format")
        return v

    @field_validator("expected_monthly_revenue")
    @classmethod
    def validate_revenue_band(cls, v):
        if v is not None and v not in MONTHLY_REVENUE_BANDS:
            raise ValueError("Invalid expected monthly revenue")
        return v

    @field_validator("agree_to_terms")
    @classmethod
    def validate_terms(cls, v):
        if not v:
            raise ValueError("You must agree to the terms and conditions")
        return v


class ApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)
    expected_version: Optional[int] = Field(None, alias="expectedVersion")

    class Config:
        populate_by_name = True


class RejectRequest(BaseModel):
    # Blank reasons are rejected by the service with a ValidationError (400)
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)
    expected_version: Optional[int] = Field(None, alias="expectedVersion")

    class Config:
        populate_by_name = True


class ReviewRequest(BaseModel):
    expected_version: Optional[int] = Field(None, alias="expectedVersion")

    class Config:
        populate_by_name = True


def application_to_dict(application, include_bank_details: bool = False) -> dict:
    """Serialize an application for API responses"""
    data = {
        "id": application.id,
        "applicationId": application.application_id,
        "userId": application.user_id,
        "status": application.status.value,
        "businessName": application.business_name,
        "businessType": application.business_type,
        "businessCategory": application.business_category,
        "businessDescription": application.business_description,
        "establishedYear": application.established_year,
        "businessEmail": application.business_email,
        "businessPhone": application.business_phone,
        "businessAddress": application.business_address,
        "city": application.city,
        "state": application.state,
        "pincode": application.pincode,
        "hasPhysicalStore": application.has_physical_store,
        "storeAddress": application.store_address,
        "expectedMonthlyRevenue": application.expected_monthly_revenue,
        "productCategories": application.product_categories or [],
        "panNumber": application.pan_number,
        "gstNumber": application.gst_number,
        "submittedAt": application.submitted_at.isoformat() if application.submitted_at else None,
        "reviewedAt": application.reviewed_at.isoformat() if application.reviewed_at else None,
        "reviewedBy": application.reviewed_by,
        "reviewNotes": application.review_notes,
        "rejectionReason": application.rejection_reason,
        "lastUpdated": application.last_updated.isoformat() if application.last_updated else None,
        "version": application.version,
    }
    if include_bank_details:
        data.update({
            "bankAccountNumber": application.bank_account_number,
            "bankName": application.bank_name,
            "bankIFSC": application.bank_ifsc,
            "accountHolderName": application.account_holder_name,
        })
    else:
        # Applicants and listings only see the last four digits
        account = application.bank_account_number or ""
        data["bankAccountNumber"] = f"****{account[-4:]}" if account else None
        data["bankName"] = application.bank_name
    if application.user is not None:
        data["user"] = {
            "id": application.user.id,
            "name": application.user.name,
            "email": application.user.email,
            "phone": application.user.phone,
        }
    return data
