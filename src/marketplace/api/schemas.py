"""Pydantic request/response schemas for the marketplace API.

These are the external contract, kept separate from the Protean commands.
Field names are snake_case in Python and camelCase on the wire; request
bodies accept either spelling.
"""

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

OrderStatusValue = Literal["PENDING", "CONFIRMED", "SHIPPED", "DELIVERED", "CANCELLED", "RETURNED"]
PaymentStatusValue = Literal["PENDING", "PAID", "FAILED", "REFUNDED"]
PaymentMethodValue = Literal["COD", "CARD"]
ProductStatusValue = Literal["ACTIVE", "DRAFT", "INACTIVE"]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(ApiModel):
    success: bool = False
    error: str
    code: str


# ---------------------------------------------------------------------------
# Address schemas
# ---------------------------------------------------------------------------
class AddressRequest(ApiModel):
    full_name: str = Field(min_length=1, max_length=150)
    phone_number: str = Field(min_length=1, max_length=30)
    line1: str = Field(min_length=1, max_length=255)
    line2: str | None = None
    city: str = Field(min_length=1, max_length=100)
    state: str | None = None
    postal_code: str | None = None
    country: str = Field(min_length=1, max_length=100)
    notes: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "fullName": "Jane Doe",
                    "phoneNumber": "+15550100",
                    "line1": "1 Main St",
                    "city": "Springfield",
                    "country": "US",
                }
            ]
        }
    )


class ReviseAddressRequest(ApiModel):
    full_name: str | None = None
    phone_number: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    notes: str | None = None


class AddressResponse(ApiModel):
    id: str
    user_id: str
    full_name: str
    phone_number: str
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str | None = None
    country: str
    notes: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Catalogue schemas
# ---------------------------------------------------------------------------
class CreateShopRequest(ApiModel):
    name: str = Field(min_length=1, max_length=150)
    description: str | None = None


class ShopResponse(ApiModel):
    id: str
    vendor_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None


class CreateProductRequest(ApiModel):
    shop_id: str
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    delivery_charge: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0, ge=0)
    status: ProductStatusValue = "ACTIVE"
    sku: str | None = None
    description: str | None = None


class AddVariantRequest(ApiModel):
    name: str = Field(min_length=1, max_length=100)
    value: str = Field(min_length=1, max_length=100)
    price_diff: float = 0.0
    stock: int = Field(default=0, ge=0)


class AddImageRequest(ApiModel):
    url: str = Field(min_length=1, max_length=500)


class ChangeProductStatusRequest(ApiModel):
    status: ProductStatusValue


class UpdatePricingRequest(ApiModel):
    price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    delivery_charge: float | None = Field(default=None, ge=0)


class RestockRequest(ApiModel):
    quantity: int = Field(ge=1)
    variant_id: str | None = None


class VariantResponse(ApiModel):
    id: str
    name: str
    value: str
    price_diff: float = 0.0
    stock: int


class ProductResponse(ApiModel):
    id: str
    shop_id: str
    name: str
    sku: str | None = None
    description: str | None = None
    price: float
    discount: float | None = None
    delivery_charge: float = 0.0
    stock: int
    status: str
    images: list[str] = []
    variants: list[VariantResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Cart schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(ApiModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(ApiModel):
    # Zero or a negative number removes the line.
    quantity: int


class CartProductSummary(ApiModel):
    id: str
    name: str
    price: float
    discount: float | None = None
    delivery_charge: float = 0.0
    stock: int
    status: str
    image: str | None = None


class CartVariantSummary(ApiModel):
    id: str
    name: str
    value: str
    price_diff: float = 0.0
    stock: int


class CartItemResponse(ApiModel):
    id: str
    product_id: str
    variant_id: str | None = None
    quantity: int
    price_snapshot: float
    delivery_charge_snapshot: float
    item_total: float
    delivery_total: float
    product: CartProductSummary | None = None
    variant: CartVariantSummary | None = None


class CartResponse(ApiModel):
    id: str
    user_id: str
    items: list[CartItemResponse] = []
    subtotal: float
    total_delivery: float
    total: float
    item_count: int
    updated_at: datetime | None = None


class CartValidationResponse(ApiModel):
    valid: bool
    errors: list[str] = []
    cart: CartResponse


# ---------------------------------------------------------------------------
# Order schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(ApiModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)


class PlaceOrderRequest(ApiModel):
    items: list[OrderItemRequest] = Field(min_length=1)
    shipping_address_id: str
    payment_method: PaymentMethodValue | None = None
    notes: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "items": [{"productId": "prod-001", "quantity": 2}],
                    "shippingAddressId": "addr-001",
                    "paymentMethod": "COD",
                }
            ]
        }
    )


class CheckoutRequest(ApiModel):
    shipping_address_id: str
    payment_method: PaymentMethodValue | None = None
    notes: str | None = None


class UpdateOrderStatusRequest(ApiModel):
    status: OrderStatusValue


class UpdatePaymentStatusRequest(ApiModel):
    payment_status: PaymentStatusValue
    payment_method: PaymentMethodValue | None = None


class UpdateOrderItemStatusRequest(ApiModel):
    status: OrderStatusValue
    tracking_code: str | None = None
    carrier: str | None = None
    tracking_url: str | None = None
    estimated_delivery: datetime | None = None


class OrderItemResponse(ApiModel):
    id: str
    product_id: str
    shop_id: str
    variant_id: str | None = None
    product_name: str
    quantity: int
    unit_price: float
    discount_amount: float = 0.0
    delivery_charge: float = 0.0
    total_price: float
    status: str
    carrier: str | None = None
    tracking_code: str | None = None
    tracking_url: str | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None


class OrderResponse(ApiModel):
    id: str
    order_number: str
    user_id: str
    status: str
    payment_status: str | None = None
    payment_method: str | None = None
    subtotal_amount: float
    discount_amount: float
    delivery_total: float
    shipping_fee: float
    total_amount: float
    notes: str | None = None
    shipping_address_id: str
    shipping_address: AddressResponse | None = None
    items: list[OrderItemResponse] = []
    placed_at: datetime | None = None
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None


class PaginationResponse(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderListResponse(ApiModel):
    orders: list[OrderResponse]
    pagination: PaginationResponse
