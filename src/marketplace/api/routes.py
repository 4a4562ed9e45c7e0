"""FastAPI routes for the marketplace: carts, orders, addresses, shops and products.

Each route translates a Pydantic schema into a Protean command, processes it
synchronously and reads the resulting aggregate back for the response.
The acting user always comes from the bearer token, never from the body.
"""

import json
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.addresses.address import find_owned_address, list_addresses
from marketplace.addresses.management import AddAddress, ReviseAddress
from marketplace.api.auth import CurrentUser, get_current_user, require_vendor
from marketplace.api.mappers import (
    address_response,
    cart_response,
    cart_validation_response,
    order_list_response,
    order_response,
    product_response,
    shop_response,
)
from marketplace.api.schemas import (
    AddImageRequest,
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    AddVariantRequest,
    CartResponse,
    CartValidationResponse,
    ChangeProductStatusRequest,
    CheckoutRequest,
    CreateProductRequest,
    CreateShopRequest,
    Envelope,
    OrderListResponse,
    OrderResponse,
    OrderStatusValue,
    PaymentStatusValue,
    PlaceOrderRequest,
    ProductResponse,
    RestockRequest,
    ReviseAddressRequest,
    ShopResponse,
    UpdateCartItemRequest,
    UpdateOrderItemStatusRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdatePricingRequest,
)
from marketplace.cart.access import load_cart
from marketplace.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from marketplace.cart.validation import validate_for_checkout
from marketplace.catalogue.lookup import get_product, get_shop
from marketplace.catalogue.management import (
    AddProductImage,
    AddVariant,
    ChangeProductStatus,
    CreateProduct,
    CreateShop,
    RestockProduct,
    UpdateProductPricing,
)
from marketplace.order.cancellation import CancelOrder
from marketplace.order.fulfillment import UpdateOrderItemStatus
from marketplace.order.placement import CheckoutCart, PlaceOrder
from marketplace.order.queries import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    get_order,
    get_order_for_user,
    list_orders,
)
from marketplace.order.status import UpdateOrderStatus, UpdatePaymentStatus


def _cart_envelope(user: CurrentUser) -> Envelope[CartResponse]:
    return Envelope[CartResponse](data=cart_response(load_cart(user.user_id)))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=Envelope[CartResponse])
async def get_cart(user: CurrentUser = Depends(get_current_user)) -> Envelope[CartResponse]:
    return _cart_envelope(user)


@cart_router.delete("", response_model=Envelope[CartResponse])
async def clear_cart(user: CurrentUser = Depends(get_current_user)) -> Envelope[CartResponse]:
    current_domain.process(ClearCart(user_id=user.user_id), asynchronous=False)
    return _cart_envelope(user)


@cart_router.get("/validate", response_model=Envelope[CartValidationResponse])
async def validate_cart(user: CurrentUser = Depends(get_current_user)) -> Envelope[CartValidationResponse]:
    validation = validate_for_checkout(user.user_id)
    return Envelope[CartValidationResponse](data=cart_validation_response(validation))


@cart_router.post("/items", status_code=201, response_model=Envelope[CartResponse])
async def add_cart_item(
    body: AddToCartRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Envelope[CartResponse]:
    command = AddToCart(
        user_id=user.user_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_envelope(user)


@cart_router.put("/items/{item_id}", response_model=Envelope[CartResponse])
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Envelope[CartResponse]:
    command = UpdateCartItem(user_id=user.user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_envelope(user)


@cart_router.delete("/items/{item_id}", response_model=Envelope[CartResponse])
async def remove_cart_item(item_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[CartResponse]:
    current_domain.process(RemoveCartItem(user_id=user.user_id, item_id=item_id), asynchronous=False)
    return _cart_envelope(user)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _order_envelope(order_id) -> Envelope[OrderResponse]:
    return Envelope[OrderResponse](data=order_response(get_order(order_id)))


@order_router.post("", status_code=201, response_model=Envelope[OrderResponse])
async def place_order(body: PlaceOrderRequest, user: CurrentUser = Depends(get_current_user)) -> Envelope[OrderResponse]:
    command = PlaceOrder(
        user_id=user.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address_id=body.shipping_address_id,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_envelope(order_id)


@order_router.post("/checkout", status_code=201, response_model=Envelope[OrderResponse])
async def checkout(body: CheckoutRequest, user: CurrentUser = Depends(get_current_user)) -> Envelope[OrderResponse]:
    command = CheckoutCart(
        user_id=user.user_id,
        shipping_address_id=body.shipping_address_id,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_envelope(order_id)


@order_router.get("", response_model=Envelope[OrderListResponse])
async def get_orders(
    user: CurrentUser = Depends(get_current_user),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    status: OrderStatusValue | None = None,
    payment_status: PaymentStatusValue | None = Query(None, alias="paymentStatus"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
) -> Envelope[OrderListResponse]:
    result = list_orders(
        user.user_id,
        status=status,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return Envelope[OrderListResponse](data=order_list_response(result))


@order_router.get("/{order_id}", response_model=Envelope[OrderResponse])
async def get_order_detail(order_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[OrderResponse]:
    return Envelope[OrderResponse](data=order_response(get_order_for_user(order_id, user.user_id)))


@order_router.patch("/{order_id}/status", response_model=Envelope[OrderResponse])
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Envelope[OrderResponse]:
    command = UpdateOrderStatus(order_id=order_id, user_id=user.user_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return _order_envelope(order_id)


@order_router.patch("/{order_id}/payment", response_model=Envelope[OrderResponse])
async def update_payment_status(
    order_id: str,
    body: UpdatePaymentStatusRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Envelope[OrderResponse]:
    command = UpdatePaymentStatus(
        order_id=order_id,
        user_id=user.user_id,
        payment_status=body.payment_status,
        payment_method=body.payment_method,
    )
    current_domain.process(command, asynchronous=False)
    return _order_envelope(order_id)


@order_router.post("/{order_id}/cancel", response_model=Envelope[OrderResponse])
async def cancel_order(order_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[OrderResponse]:
    current_domain.process(CancelOrder(order_id=order_id, user_id=user.user_id), asynchronous=False)
    return _order_envelope(order_id)


@order_router.patch("/{order_id}/items/{order_item_id}/status", response_model=Envelope[OrderResponse])
async def update_order_item_status(
    order_id: str,
    order_item_id: str,
    body: UpdateOrderItemStatusRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[OrderResponse]:
    command = UpdateOrderItemStatus(
        order_id=order_id,
        order_item_id=order_item_id,
        vendor_id=vendor.user_id,
        status=body.status,
        tracking_code=body.tracking_code,
        carrier=body.carrier,
        tracking_url=body.tracking_url,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    return _order_envelope(order_id)


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201, response_model=Envelope[AddressResponse])
async def add_address(body: AddressRequest, user: CurrentUser = Depends(get_current_user)) -> Envelope[AddressResponse]:
    address_id = current_domain.process(AddAddress(user_id=user.user_id, **body.model_dump()), asynchronous=False)
    return Envelope[AddressResponse](data=address_response(find_owned_address(address_id, user.user_id)))


@address_router.get("", response_model=Envelope[list[AddressResponse]])
async def get_addresses(user: CurrentUser = Depends(get_current_user)) -> Envelope[list[AddressResponse]]:
    return Envelope[list[AddressResponse]](data=[address_response(a) for a in list_addresses(user.user_id)])


@address_router.get("/{address_id}", response_model=Envelope[AddressResponse])
async def get_address(address_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[AddressResponse]:
    return Envelope[AddressResponse](data=address_response(find_owned_address(address_id, user.user_id)))


@address_router.put("/{address_id}", status_code=201, response_model=Envelope[AddressResponse])
async def revise_address(
    address_id: str,
    body: ReviseAddressRequest,
    user: CurrentUser = Depends(get_current_user),
) -> Envelope[AddressResponse]:
    """Store an edited copy; the response carries the new address id."""
    command = ReviseAddress(user_id=user.user_id, address_id=address_id, **body.model_dump())
    new_id = current_domain.process(command, asynchronous=False)
    return Envelope[AddressResponse](data=address_response(find_owned_address(new_id, user.user_id)))


# ---------------------------------------------------------------------------
# Shop Router
# ---------------------------------------------------------------------------
shop_router = APIRouter(prefix="/shops", tags=["shops"])


@shop_router.post("", status_code=201, response_model=Envelope[ShopResponse])
async def create_shop(body: CreateShopRequest, vendor: CurrentUser = Depends(require_vendor)) -> Envelope[ShopResponse]:
    command = CreateShop(vendor_id=vendor.user_id, name=body.name, description=body.description)
    shop_id = current_domain.process(command, asynchronous=False)
    return Envelope[ShopResponse](data=shop_response(get_shop(shop_id)))


@shop_router.get("/{shop_id}", response_model=Envelope[ShopResponse])
async def get_shop_detail(shop_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[ShopResponse]:
    return Envelope[ShopResponse](data=shop_response(get_shop(shop_id)))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _product_envelope(product_id) -> Envelope[ProductResponse]:
    return Envelope[ProductResponse](data=product_response(get_product(product_id)))


@product_router.post("", status_code=201, response_model=Envelope[ProductResponse])
async def create_product(
    body: CreateProductRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = CreateProduct(vendor_id=vendor.user_id, **body.model_dump())
    product_id = current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)


@product_router.get("/{product_id}", response_model=Envelope[ProductResponse])
async def get_product_detail(product_id: str, user: CurrentUser = Depends(get_current_user)) -> Envelope[ProductResponse]:
    return _product_envelope(product_id)


@product_router.post("/{product_id}/variants", status_code=201, response_model=Envelope[ProductResponse])
async def add_variant(
    product_id: str,
    body: AddVariantRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = AddVariant(vendor_id=vendor.user_id, product_id=product_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)


@product_router.post("/{product_id}/images", status_code=201, response_model=Envelope[ProductResponse])
async def add_image(
    product_id: str,
    body: AddImageRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = AddProductImage(vendor_id=vendor.user_id, product_id=product_id, url=body.url)
    current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)


@product_router.patch("/{product_id}/status", response_model=Envelope[ProductResponse])
async def change_product_status(
    product_id: str,
    body: ChangeProductStatusRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = ChangeProductStatus(vendor_id=vendor.user_id, product_id=product_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)


@product_router.patch("/{product_id}/pricing", response_model=Envelope[ProductResponse])
async def update_pricing(
    product_id: str,
    body: UpdatePricingRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = UpdateProductPricing(vendor_id=vendor.user_id, product_id=product_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)


@product_router.post("/{product_id}/restock", response_model=Envelope[ProductResponse])
async def restock_product(
    product_id: str,
    body: RestockRequest,
    vendor: CurrentUser = Depends(require_vendor),
) -> Envelope[ProductResponse]:
    command = RestockProduct(
        vendor_id=vendor.user_id,
        product_id=product_id,
        quantity=body.quantity,
        variant_id=body.variant_id,
    )
    current_domain.process(command, asynchronous=False)
    return _product_envelope(product_id)
