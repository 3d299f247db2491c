"""
Shared Pydantic schemas used across the application.
Request/response bodies of the public, tenant and superadmin APIs.
"""

from datetime import date, datetime
from typing import Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from shared.config.constants import Limits
from shared.utils.validators import validate_image_url, validate_slug


# =============================================================================
# Common Types
# =============================================================================

EstablishmentStatusLiteral = Literal["active", "suspended", "pending"]
TableStatusLiteral = Literal["available", "occupied", "reserved"]
CommandStatusLiteral = Literal["open", "closed"]
OrderTypeLiteral = Literal["table", "delivery"]
OrderStatusLiteral = Literal["pending", "preparing", "ready", "delivered", "cancelled"]
ReservationStatusLiteral = Literal["pending", "confirmed", "cancelled"]

# Settings values accepted from the admin UI; everything is stored as text
SettingValue = Union[bool, int, float, str, None]


class CreatedResponse(BaseModel):
    id: int


class SuccessResponse(BaseModel):
    success: bool = True


class PartialUpdate(BaseModel):
    """
    Body of a PUT where every field is optional. Omitted fields stay as they
    are; an explicit null is only allowed for columns that accept one.
    """

    required_if_sent: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(name for name in cls.required_if_sent if name in data and data[name] is None)
            if nulls:
                raise ValueError(f"Campos não podem ser nulos: {', '.join(nulls)}")
        return data


# =============================================================================
# Registration / Authentication Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    slug: str = Field(min_length=1, max_length=Limits.MAX_SLUG_LENGTH)
    owner_email: EmailStr
    owner_phone: Optional[str] = None
    password: str = Field(min_length=6, max_length=128)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v: str) -> str:
        return validate_slug(v)


class RegisterResponse(BaseModel):
    id: int
    slug: str


class EstablishmentPublic(BaseModel):
    id: int
    name: str
    slug: str
    status: str

    class Config:
        from_attributes = True


class TenantLoginRequest(BaseModel):
    slug: str
    password: str


class SuperadminLoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SuperadminVerifyResponse(BaseModel):
    valid: bool = True
    username: str


# =============================================================================
# Catalog Schemas
# =============================================================================


class CategoryOutput(BaseModel):
    id: int
    establishment_id: int
    name: str

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)


class CategoryUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)


class ProductOutput(BaseModel):
    id: int
    establishment_id: int
    category_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    is_available: bool

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    category_id: Optional[int] = None
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: Optional[str] = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: float = Field(ge=0, le=Limits.MAX_PRICE)
    image_url: Optional[str] = None
    is_available: bool = True

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class ProductUpdate(PartialUpdate):
    required_if_sent = frozenset({"name", "price", "is_available"})

    category_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: Optional[str] = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: Optional[float] = Field(default=None, ge=0, le=Limits.MAX_PRICE)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class NeighborhoodOutput(BaseModel):
    id: int
    establishment_id: int
    name: str
    delivery_fee: float

    class Config:
        from_attributes = True


class NeighborhoodCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    delivery_fee: float = Field(ge=0, le=Limits.MAX_PRICE)


class NeighborhoodUpdate(PartialUpdate):
    required_if_sent = frozenset({"name", "delivery_fee"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    delivery_fee: Optional[float] = Field(default=None, ge=0, le=Limits.MAX_PRICE)


# =============================================================================
# Table / Command Schemas
# =============================================================================


class TableOutput(BaseModel):
    id: int
    establishment_id: int
    number: int
    status: str

    class Config:
        from_attributes = True


class TableCreate(BaseModel):
    number: int = Field(ge=1)


class TableUpdate(PartialUpdate):
    required_if_sent = frozenset({"number", "status"})

    number: Optional[int] = Field(default=None, ge=1)
    status: Optional[TableStatusLiteral] = None


class CommandOutput(BaseModel):
    id: int
    establishment_id: int
    table_id: Optional[int] = None
    table_number: Optional[int] = None
    waiter_name: Optional[str] = None
    status: str
    created_at: datetime


class CommandCreate(BaseModel):
    table_id: int
    waiter_name: Optional[str] = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)


class CommandUpdate(BaseModel):
    status: CommandStatusLiteral


# =============================================================================
# Order / Reservation Schemas
# =============================================================================


class OrderOutput(BaseModel):
    id: int
    establishment_id: int
    customer_name: str
    customer_phone: Optional[str] = None
    type: str
    address: Optional[str] = None
    neighborhood_id: Optional[int] = None
    neighborhood_name: Optional[str] = None
    items_text: str
    total: float
    payment_method: Optional[str] = None
    status: str
    created_at: datetime


class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    customer_phone: Optional[str] = None
    type: OrderTypeLiteral
    address: Optional[str] = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    neighborhood_id: Optional[int] = None
    items_text: str = Field(min_length=1, max_length=Limits.MAX_ITEMS_TEXT_LENGTH)
    total: float = Field(ge=0, le=Limits.MAX_PRICE)
    payment_method: Optional[str] = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)


class OrderStatusUpdate(BaseModel):
    status: OrderStatusLiteral


class ReservationOutput(BaseModel):
    id: int
    establishment_id: int
    customer_name: str
    customer_phone: str
    table_id: Optional[int] = None
    table_number: Optional[int] = None
    reservation_time: datetime
    guests: int
    status: str
    created_at: datetime


class ReservationCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    customer_phone: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    table_id: Optional[int] = None
    reservation_time: datetime
    guests: int = Field(default=1, ge=1, le=500)


class ReservationUpdate(BaseModel):
    status: ReservationStatusLiteral


# =============================================================================
# Subscription Schemas
# =============================================================================


class SubscriptionOutput(BaseModel):
    id: int
    plan_id: int
    price: float
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    next_payment_date: Optional[date] = None

    class Config:
        from_attributes = True


class SubscriptionStatusOutput(BaseModel):
    plan_code: str
    plan_name: str
    status: str
    paid_until: Optional[date] = None
    days_remaining: Optional[int] = None
    lifecycle_state: str
    subscription: Optional[SubscriptionOutput] = None


class UpgradeRequest(BaseModel):
    plan_id: int
    months: int = Field(default=1, ge=1, le=Limits.MAX_SUBSCRIPTION_MONTHS)


class RenewRequest(BaseModel):
    months: int = Field(default=1, ge=1, le=Limits.MAX_SUBSCRIPTION_MONTHS)


class SubscriptionCheckReport(BaseModel):
    checked: int = 0
    reminders_7d: int = 0
    reminders_3d: int = 0
    downgraded: int = 0
    skipped_duplicates: int = 0
    errors: int = 0


# =============================================================================
# Webhook Schemas
# =============================================================================


class OrderSyncWebhook(BaseModel):
    """Order placed in the external storefront that sells the premium plan."""

    api_key: str
    store_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    owner_email: EmailStr
    owner_phone: Optional[str] = None
    months: int = Field(default=1, ge=1, le=Limits.MAX_SUBSCRIPTION_MONTHS)
    external_order_id: Optional[str] = None


class OrderSyncResponse(BaseModel):
    id: int
    slug: str
    created: bool


class PaymentWebhook(BaseModel):
    api_key: str
    slug: str
    status: str
    months: int = Field(default=1, ge=1, le=Limits.MAX_SUBSCRIPTION_MONTHS)
    payment_id: Optional[str] = None


class PaymentWebhookResponse(BaseModel):
    renewed: bool
    paid_until: Optional[date] = None


# =============================================================================
# Superadmin Schemas
# =============================================================================


class PlanOutput(BaseModel):
    id: int
    code: str
    name: str
    price: float
    max_products: Optional[int] = None
    enable_ai: bool
    enable_reservations: bool
    enable_automation: bool

    class Config:
        from_attributes = True


class PlanCreate(BaseModel):
    code: str = Field(min_length=1, max_length=40, pattern=r"^[a-z0-9_-]+$")
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    price: float = Field(ge=0, le=Limits.MAX_PRICE)
    max_products: Optional[int] = Field(default=None, ge=0)
    enable_ai: bool = False
    enable_reservations: bool = False
    enable_automation: bool = False


class PlanUpdate(PartialUpdate):
    # max_products may be cleared: null means unlimited
    required_if_sent = frozenset({"name", "price", "enable_ai", "enable_reservations", "enable_automation"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    price: Optional[float] = Field(default=None, ge=0, le=Limits.MAX_PRICE)
    max_products: Optional[int] = Field(default=None, ge=0)
    enable_ai: Optional[bool] = None
    enable_reservations: Optional[bool] = None
    enable_automation: Optional[bool] = None


class EstablishmentAdminOutput(BaseModel):
    id: int
    name: str
    slug: str
    owner_email: str
    owner_phone: Optional[str] = None
    plan_id: int
    plan_name: str
    plan_code: str
    status: str
    paid_until: Optional[date] = None
    trial_ends_at: Optional[date] = None
    last_payment_at: Optional[datetime] = None
    created_at: datetime


class EstablishmentAdminUpdate(PartialUpdate):
    required_if_sent = frozenset({"name", "owner_email", "plan_id", "status"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    owner_email: Optional[EmailStr] = None
    owner_phone: Optional[str] = None
    plan_id: Optional[int] = None
    status: Optional[EstablishmentStatusLiteral] = None
    paid_until: Optional[date] = None
    trial_ends_at: Optional[date] = None
