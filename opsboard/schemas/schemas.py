# OPSBOARD/opsboard/schemas/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List, Literal
from datetime import datetime

from opsboard.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_PROFIT_MARGIN,
    MAX_ORDER_QUANTITY,
    MAX_PRODUCT_QUANTITY,
    MAX_PROFIT_MARGIN,
)

OrderStatus = Literal[
    "New Inquiry",
    "In Progress",
    "Deposit Received",
    "Ready for Delivery",
    "Completed",
    "Cancelled",
]

# ---------- USER SCHEMAS ----------
class UserCreate(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None

class UserLogin(BaseModel):
    email: str
    password: str

class UserOut(BaseModel):
    id: int
    email: str

    model_config = ConfigDict(from_attributes=True)

class ProfileOut(BaseModel):
    id: int
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    business_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=50)

class PasswordChange(BaseModel):
    current_password: str
    new_password: str

# ---------- TOKEN SCHEMA ----------
class Token(BaseModel):
    access_token: str
    token_type: str

# ---------- BUSINESS SCHEMAS ----------
class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    currency: str = DEFAULT_CURRENCY

class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    currency: Optional[str] = None

class BusinessOut(BaseModel):
    id: int
    name: str
    currency: str
    currency_symbol: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CurrencyOut(BaseModel):
    code: str
    label: str
    symbol: str

class MeOut(BaseModel):
    user: UserOut
    profile: Optional[ProfileOut] = None
    business: Optional[BusinessOut] = None
    roles: List[str] = []
    is_platform_admin: bool = False
    needs_onboarding: bool = True

# ---------- INVENTORY SCHEMAS ----------
class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: float = 0
    unit_cost: Optional[float] = Field(None, ge=0)
    total_cost: Optional[float] = Field(None, ge=0)
    reorder_level: Optional[float] = None
    category: Optional[str] = None

class InventoryItemOut(BaseModel):
    id: int
    name: str
    quantity: float
    unit_cost: Optional[float] = 0
    total_cost: Optional[float] = 0
    reorder_level: Optional[float] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    business_id: int
    used_in_products: float = 0
    available: float = 0
    stock_status: str = "in-stock"

    model_config = ConfigDict(from_attributes=True)

class InventoryListOut(BaseModel):
    items: List[InventoryItemOut]
    total_count: int
    filtered_count: int

class StockAdjustment(BaseModel):
    type: Literal["add", "remove"]
    quantity: float = Field(..., gt=0)

# ---------- PRODUCT SCHEMAS ----------
class ComponentIn(BaseModel):
    inventory_item_id: int
    quantity: float = Field(..., gt=0)

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity_available: int = Field(0, ge=0, le=MAX_PRODUCT_QUANTITY)
    profit_margin: float = Field(DEFAULT_PROFIT_MARGIN, ge=0, le=MAX_PROFIT_MARGIN)
    components: List[ComponentIn] = []

class ComponentOut(BaseModel):
    id: Optional[int] = None
    inventory_item_id: int
    inventory_item_name: Optional[str] = None
    quantity: float
    unit_cost: float = 0
    line_cost: float = 0

class ProductOut(BaseModel):
    id: int
    name: str
    quantity_available: int
    profit_margin: Optional[float] = 0
    sale_price: Optional[float] = 0
    total_cost: float = 0
    components: List[ComponentOut] = []
    created_at: Optional[datetime] = None

class StockWarning(BaseModel):
    inventory_item_id: int
    item_name: str
    required: float
    available: float

class ProductPreviewOut(BaseModel):
    total_cost: float
    sale_price: float
    warnings: List[StockWarning] = []

# ---------- ORDER SCHEMAS ----------
class OrderCreate(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=100)
    client_contact: Optional[str] = Field(None, max_length=255)
    product_id: int
    quantity: int = Field(1, ge=1, le=MAX_ORDER_QUANTITY)
    delivery_info: Optional[str] = Field(None, max_length=1000)
    payment_method: Optional[str] = Field(None, max_length=100)

class OrderUpdate(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=100)
    client_contact: Optional[str] = Field(None, max_length=255)
    quantity: int = Field(..., ge=1, le=MAX_ORDER_QUANTITY)
    delivery_info: Optional[str] = Field(None, max_length=1000)
    payment_method: Optional[str] = Field(None, max_length=100)

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class DriverAssignment(BaseModel):
    driver_id: Optional[int] = None

class OrderOut(BaseModel):
    id: int
    client_name: str
    client_contact: Optional[str] = None
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    sale_price: float
    delivery_info: Optional[str] = None
    payment_method: Optional[str] = None
    status: str
    assigned_driver_id: Optional[int] = None
    inventory_deducted: bool = False
    delivery_token: Optional[str] = None
    delivery_link: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    created_at: datetime

    @field_serializer('created_at')
    def serialize_datetime(self, value: datetime) -> str:
        """Sérialise un datetime en chaîne ISO 8601 pour JSON."""
        return value.isoformat()

class KanbanColumn(BaseModel):
    status: str
    count: int
    orders: List[OrderOut]

# ---------- DELIVERY SCHEMAS ----------
class DeliveryOrderSummary(BaseModel):
    id: int
    client_name: str
    product_name: str
    quantity: int
    delivery_info: Optional[str] = None
    status: str

class DeliveryConfirmationOut(BaseModel):
    id: int
    order: DeliveryOrderSummary
    is_confirmed: bool
    confirmed_at: Optional[datetime] = None
    delivery_photo_url: Optional[str] = None
    driver_notes: Optional[str] = None

class DriverDashboardOut(BaseModel):
    pending: List[OrderOut]
    completed: List[OrderOut]
    pending_count: int
    completed_count: int
    completed_today: int

# ---------- TEAM SCHEMAS ----------
class InviteRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    full_name: Optional[str] = Field(None, max_length=200)
    role: Literal["admin", "driver"] = "driver"

class TeamMemberOut(BaseModel):
    id: int
    user_id: int
    role: str
    created_at: Optional[datetime] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None

class InviteResult(BaseModel):
    member: TeamMemberOut
    created_account: bool
    temporary_password: Optional[str] = None

# ---------- BUDGET SCHEMAS ----------
class BudgetUpdate(BaseModel):
    total_budget: float = Field(..., ge=0)
    amount_spent: float = Field(..., ge=0)

class BudgetOut(BaseModel):
    id: int
    total_budget: float
    amount_spent: float
    remaining: float
    is_over_budget: bool

# ---------- PRIVILEGED FUNCTION SCHEMAS ----------
class AdminProfileUpdate(BaseModel):
    target_user_id: Optional[int] = None
    full_name: Optional[str] = None
    email: Optional[str] = None

class DeleteUserRequest(BaseModel):
    user_id: Optional[int] = None
