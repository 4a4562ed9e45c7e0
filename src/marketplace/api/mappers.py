"""Aggregate → response model mapping.

Each function takes one domain object and returns one response schema;
nothing untyped crosses from the domain into the HTTP layer.
"""

from marketplace.addresses.address import OrderAddress, find_address
from marketplace.api.schemas import (
    AddressResponse,
    CartItemResponse,
    CartProductSummary,
    CartResponse,
    CartValidationResponse,
    CartVariantSummary,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    PaginationResponse,
    ProductResponse,
    ShopResponse,
    VariantResponse,
)
from marketplace.cart.cart import Cart
from marketplace.cart.validation import CartValidation
from marketplace.catalogue.lookup import find_product
from marketplace.catalogue.product import Product
from marketplace.catalogue.shop import Shop
from marketplace.order.order import Order
from marketplace.order.queries import OrderPage


def _optional_id(value) -> str | None:
    return str(value) if value else None


def address_response(address: OrderAddress) -> AddressResponse:
    return AddressResponse(
        id=str(address.id),
        user_id=str(address.user_id),
        full_name=address.full_name,
        phone_number=address.phone_number,
        line1=address.line1,
        line2=address.line2,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
        notes=address.notes,
        created_at=address.created_at,
    )


def shop_response(shop: Shop) -> ShopResponse:
    return ShopResponse(
        id=str(shop.id),
        vendor_id=str(shop.vendor_id),
        name=shop.name,
        description=shop.description,
        created_at=shop.created_at,
    )


def variant_response(variant) -> VariantResponse:
    return VariantResponse(
        id=str(variant.id),
        name=variant.name,
        value=variant.value,
        price_diff=variant.price_diff or 0.0,
        stock=variant.stock,
    )


def product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        shop_id=str(product.shop_id),
        name=product.name,
        sku=product.sku,
        description=product.description,
        price=product.price,
        discount=product.discount,
        delivery_charge=product.delivery_charge or 0.0,
        stock=product.stock,
        status=product.status,
        images=[image.url for image in sorted(product.images, key=lambda i: i.display_order)],
        variants=[variant_response(v) for v in product.variants],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _cart_item_response(item, product: Product | None) -> CartItemResponse:
    product_summary = None
    variant_summary = None
    if product is not None:
        product_summary = CartProductSummary(
            id=str(product.id),
            name=product.name,
            price=product.price,
            discount=product.discount,
            delivery_charge=product.delivery_charge or 0.0,
            stock=product.stock,
            status=product.status,
            image=product.primary_image_url,
        )
        variant = product.find_variant(item.variant_id) if item.variant_id else None
        if variant is not None:
            variant_summary = CartVariantSummary(
                id=str(variant.id),
                name=variant.name,
                value=variant.value,
                price_diff=variant.price_diff or 0.0,
                stock=variant.stock,
            )

    return CartItemResponse(
        id=str(item.id),
        product_id=str(item.product_id),
        variant_id=_optional_id(item.variant_id),
        quantity=item.quantity,
        price_snapshot=item.price_snapshot,
        delivery_charge_snapshot=item.delivery_charge_snapshot or 0.0,
        item_total=item.item_total,
        delivery_total=item.delivery_total,
        product=product_summary,
        variant=variant_summary,
    )


def cart_response(cart: Cart) -> CartResponse:
    """Map a cart, joining each line to the live product and variant."""
    items = sorted(cart.items, key=lambda i: i.added_at or cart.created_at)
    return CartResponse(
        id=str(cart.id),
        user_id=str(cart.user_id),
        items=[_cart_item_response(item, find_product(item.product_id)) for item in items],
        subtotal=cart.subtotal,
        total_delivery=cart.total_delivery,
        total=cart.total,
        item_count=cart.item_count,
        updated_at=cart.updated_at,
    )


def cart_validation_response(validation: CartValidation) -> CartValidationResponse:
    return CartValidationResponse(
        valid=validation.valid,
        errors=validation.errors,
        cart=cart_response(validation.cart),
    )


def order_item_response(item) -> OrderItemResponse:
    return OrderItemResponse(
        id=str(item.id),
        product_id=str(item.product_id),
        shop_id=str(item.shop_id),
        variant_id=_optional_id(item.variant_id),
        product_name=item.product_name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        discount_amount=item.discount_amount or 0.0,
        delivery_charge=item.delivery_charge or 0.0,
        total_price=item.total_price,
        status=item.status,
        carrier=item.carrier,
        tracking_code=item.tracking_code,
        tracking_url=item.tracking_url,
        estimated_delivery=item.estimated_delivery,
        delivered_at=item.delivered_at,
    )


def order_response(order: Order, include_address: bool = True) -> OrderResponse:
    address = find_address(order.shipping_address_id) if include_address else None
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        subtotal_amount=order.subtotal_amount,
        discount_amount=order.discount_amount,
        delivery_total=order.delivery_total,
        shipping_fee=order.shipping_fee,
        total_amount=order.total_amount,
        notes=order.notes,
        shipping_address_id=str(order.shipping_address_id),
        shipping_address=address_response(address) if address is not None else None,
        items=[order_item_response(item) for item in order.items],
        placed_at=order.placed_at,
        updated_at=order.updated_at,
        cancelled_at=order.cancelled_at,
    )


def order_list_response(page: OrderPage) -> OrderListResponse:
    return OrderListResponse(
        orders=[order_response(order, include_address=False) for order in page.orders],
        pagination=PaginationResponse(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        ),
    )
