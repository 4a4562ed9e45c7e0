"""BDD tests for order placement."""

from pytest_bdd import scenarios

scenarios("features/order_placement.feature")
