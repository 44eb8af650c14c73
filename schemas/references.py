from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from utils.slug import slug_base


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError('Name cannot be blank')
    if not slug_base(value):
        raise ValueError('Name needs at least one letter or digit')
    return value


class NamedEntityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10000)
    status: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        return _clean_name(value)


class NamedEntityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10000)
    status: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value):
        if value is None:
            return value
        return _clean_name(value)


class NamedEntityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: Optional[str]
    description: Optional[str]
    status: bool
    product_count: int
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class SubCategoryCreate(NamedEntityCreate):
    category_id: int


class SubCategoryUpdate(NamedEntityUpdate):
    category_id: Optional[int] = None


class SubCategoryResponse(NamedEntityResponse):
    category_id: int


def _normalize_url(value: str) -> str:
    value = value.strip().rstrip("/").lower()
    if not value.startswith(("http://", "https://")):
        raise ValueError('URL must start with http:// or https://')
    return value


class WebsiteCreate(NamedEntityCreate):
    url: str = Field(min_length=4, max_length=500)

    @field_validator('url')
    @classmethod
    def validate_url(cls, value):
        return _normalize_url(value)


class WebsiteUpdate(NamedEntityUpdate):
    url: Optional[str] = Field(default=None, min_length=4, max_length=500)

    @field_validator('url')
    @classmethod
    def validate_url(cls, value):
        if value is None:
            return value
        return _normalize_url(value)


class WebsiteResponse(NamedEntityResponse):
    url: str


class VendorCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str = Field(pattern=r"^[0-9\-+\s]+$", max_length=50)
    company_name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip()


class VendorUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=r"^[0-9\-+\s]+$", max_length=50)
    company_name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip() if value else value


class VendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    company_name: Optional[str]
    city: Optional[str]
    country: Optional[str]
    deleted_at: Optional[datetime] = None
