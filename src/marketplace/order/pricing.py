"""Order line pricing.

There is one rule for what a line costs and one rule for how lines roll up
into an order:

    line_subtotal = unit_price * quantity
    line_discount = discount% of line_subtotal
    line_delivery = delivery_charge * quantity
    total_price   = line_subtotal - line_discount + line_delivery

    total = subtotal - discount + delivery_total + shipping_fee

A line priced straight from the catalogue uses the list price and the
product's discount. A line checked out from a cart uses the cart's price
snapshot, which already has the discount applied, so its line discount is 0.
"""

from dataclasses import dataclass

SHIPPING_FEE = 0.0


def round_money(amount) -> float:
    return round(amount, 2)


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    shop_id: str
    product_name: str
    quantity: int
    unit_price: float
    line_subtotal: float
    line_discount: float
    delivery_charge: float
    line_delivery: float
    total_price: float
    variant_id: str | None = None


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    discount: float
    delivery_total: float
    shipping_fee: float
    total: float

    @classmethod
    def from_lines(cls, lines, shipping_fee=SHIPPING_FEE):
        subtotal = round_money(sum(line.line_subtotal for line in lines))
        discount = round_money(sum(line.line_discount for line in lines))
        delivery_total = round_money(sum(line.line_delivery for line in lines))
        return cls(
            subtotal=subtotal,
            discount=discount,
            delivery_total=delivery_total,
            shipping_fee=shipping_fee,
            total=round_money(subtotal - discount + delivery_total + shipping_fee),
        )


def _priced(product, variant, quantity, unit_price, discount_percent, delivery_charge) -> PricedLine:
    line_subtotal = round_money(unit_price * quantity)
    line_discount = round_money(line_subtotal * (discount_percent or 0.0) / 100)
    line_delivery = round_money((delivery_charge or 0.0) * quantity)
    return PricedLine(
        product_id=str(product.id),
        shop_id=str(product.shop_id),
        product_name=product.name,
        variant_id=str(variant.id) if variant is not None else None,
        quantity=quantity,
        unit_price=round_money(unit_price),
        line_subtotal=line_subtotal,
        line_discount=line_discount,
        delivery_charge=delivery_charge or 0.0,
        line_delivery=line_delivery,
        total_price=round_money(line_subtotal - line_discount + line_delivery),
    )


def price_catalogue_line(product, variant, quantity) -> PricedLine:
    """Price a line from current catalogue values."""
    return _priced(
        product,
        variant,
        quantity,
        unit_price=product.unit_price(variant),
        discount_percent=product.discount,
        delivery_charge=product.delivery_charge,
    )


def price_cart_line(product, variant, cart_item) -> PricedLine:
    """Price a line from a cart line's snapshots."""
    return _priced(
        product,
        variant,
        cart_item.quantity,
        unit_price=cart_item.price_snapshot,
        discount_percent=0.0,
        delivery_charge=cart_item.delivery_charge_snapshot,
    )
