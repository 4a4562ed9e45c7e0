"""Shared BDD fixtures and step definitions for orders and carts."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when

from marketplace.catalogue.product import Product
from marketplace.errors import MarketplaceError
from marketplace.order.cancellation import CancelOrder
from marketplace.order.order import Order
from marketplace.order.placement import CheckoutCart, PlaceOrder


@pytest.fixture()
def products():
    """Product ids keyed by name."""
    return {}


@pytest.fixture()
def outcome():
    """Result of the last When step: the placed order id or the raised error."""
    return {}


def _product(products, name):
    return current_domain.repository_for(Product).get(products[name])


def _attempt(outcome, command):
    try:
        outcome["order_id"] = current_domain.process(command, asynchronous=False)
        outcome.pop("error", None)
    except MarketplaceError as exc:
        outcome["error"] = exc


def place_order(outcome, user_id, address_id, products, quantities):
    items = [{"product_id": products[name], "quantity": qty} for name, qty in quantities]
    _attempt(
        outcome,
        PlaceOrder(user_id=user_id, items=json.dumps(items), shipping_address_id=address_id),
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse(
        'a product "{name}" priced {price:f} with {discount:d} percent discount and {stock:d} in stock'
    )
)
def _(products, make_product, name, price, discount, stock):
    products[name] = make_product(name=name, price=price, discount=float(discount) or None, stock=stock)


@given("the customer has a shipping address", target_fixture="shipping_address_id")
def _(address_id):
    return address_id


@given(parsers.cfparse('the customer has ordered {qty:d} of "{name}"'), target_fixture="order_id")
def _(outcome, user_id, shipping_address_id, products, qty, name):
    place_order(outcome, user_id, shipping_address_id, products, [(name, qty)])
    return outcome["order_id"]


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.re(r'the customer orders (?P<qty>\d+) of "(?P<name>[^"]+)"$'), converters={"qty": int})
def _(outcome, user_id, shipping_address_id, products, qty, name):
    place_order(outcome, user_id, shipping_address_id, products, [(name, qty)])


@when(parsers.cfparse('the customer orders {qty:d} of "{name}" and {other_qty:d} of "{other}"'))
def _(outcome, user_id, shipping_address_id, products, qty, name, other_qty, other):
    place_order(outcome, user_id, shipping_address_id, products, [(name, qty), (other, other_qty)])


@when("the customer checks out")
def _(outcome, user_id, shipping_address_id):
    _attempt(outcome, CheckoutCart(user_id=user_id, shipping_address_id=shipping_address_id))


@when("the customer cancels the order")
def _(outcome, user_id, order_id):
    _attempt(outcome, CancelOrder(order_id=order_id, user_id=user_id))


@when(parsers.cfparse('customer "{other_user}" cancels the order'))
def _(outcome, order_id, other_user):
    _attempt(outcome, CancelOrder(order_id=order_id, user_id=other_user))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is placed")
def _(outcome):
    assert "error" not in outcome, outcome.get("error")
    assert outcome["order_id"]


@then("the order is rejected")
def _(outcome):
    assert "error" in outcome


@then(parsers.re(r"the order is rejected with [\"'](?P<message>.+)[\"']$"))
def _(outcome, message):
    assert "error" in outcome
    assert message in str(outcome["error"])


@then(parsers.cfparse("the order subtotal is {amount:f}"))
def _(outcome, amount):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).subtotal_amount == amount


@then(parsers.cfparse("the order discount is {amount:f}"))
def _(outcome, amount):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).discount_amount == amount


@then(parsers.cfparse("the order total is {amount:f}"))
def _(outcome, amount):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).total_amount == amount


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert _product(products, name).stock == stock


@then("no order exists")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then(parsers.cfparse("{count:d} orders exist"))
def _(count):
    assert current_domain.repository_for(Order)._dao.query.all().total == count
