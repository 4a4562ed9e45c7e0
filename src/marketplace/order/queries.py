"""Order reads: single order with ownership check, and the paged history."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.errors import ForbiddenError, NotFoundError
from marketplace.order.order import Order

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class OrderPage:
    orders: list[Order]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise NotFoundError("Order not found") from None


def get_order_for_user(order_id, user_id) -> Order:
    order = get_order(order_id)
    if not order.is_owned_by(user_id):
        raise ForbiddenError("Unauthorized: You do not own this order")
    return order


def order_number_taken(order_number) -> bool:
    repo = current_domain.repository_for(Order)
    return bool(repo._dao.query.filter(order_number=order_number).all().items)


def _as_utc(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def list_orders(
    user_id,
    status=None,
    payment_status=None,
    start_date=None,
    end_date=None,
    page=DEFAULT_PAGE,
    limit=DEFAULT_LIMIT,
) -> OrderPage:
    """A user's orders, newest first. Dates bound `placed_at` inclusively."""
    page = max(int(page or DEFAULT_PAGE), 1)
    limit = min(max(int(limit or DEFAULT_LIMIT), 1), MAX_LIMIT)

    filters = {"user_id": str(user_id)}
    if status:
        filters["status"] = status
    if payment_status:
        filters["payment_status"] = payment_status
    if start_date:
        filters["placed_at__gte"] = _as_utc(start_date)
    if end_date:
        filters["placed_at__lte"] = _as_utc(end_date)

    repo = current_domain.repository_for(Order)
    results = (
        repo._dao.query.filter(**filters)
        .order_by("-placed_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return OrderPage(orders=list(results.items), total=results.total, page=page, limit=limit)
