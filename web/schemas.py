"""
Response documents for the storefront pages.

Templates live outside this service; every page is returned as one of these
models and rendered by the front end.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    image: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str = ""
    email: str
    role: str = "user"


class FormPage(BaseModel):
    page: str
    action: str
    fields: List[str]
    google_login: Optional[str] = None


class CatalogOut(BaseModel):
    products: List[ProductOut]
    is_logged_in: bool = False


class DashboardOut(BaseModel):
    user: UserOut
    products: List[ProductOut]
    cart_count: int = 0


class ProductPage(BaseModel):
    user: UserOut
    product: ProductOut


class CartLineOut(BaseModel):
    cart_id: int
    product_id: int
    name: str
    price: Decimal
    quantity: int
    total: Decimal


class CartOut(BaseModel):
    user: UserOut
    items: List[CartLineOut]


class CheckoutOut(BaseModel):
    user: UserOut
    items: List[CartLineOut]
    total: Decimal


class OrderItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal
    subtotal: Decimal


class OrderOut(BaseModel):
    id: int
    full_name: str
    phone_number: str
    address: str
    city: str
    province: str
    total_amount: Decimal
    payment_method: str
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]


class OrdersOut(BaseModel):
    user: UserOut
    orders: List[OrderOut]
