"""Cart lookup by owner. A user's cart is created on first use."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart


def find_cart(user_id) -> Cart | None:
    carts = current_domain.repository_for(Cart)._dao.query.filter(user_id=str(user_id)).limit(1).all().items
    return carts[0] if carts else None


def load_cart(user_id) -> Cart:
    """Return the user's cart, creating and storing an empty one if needed.

    A user owns at most one cart. If another request stores it first, that
    cart is returned instead.
    """
    cart = find_cart(user_id)
    if cart is not None:
        return cart

    cart = Cart.create(user_id=user_id)
    repo = current_domain.repository_for(Cart)
    try:
        repo._dao._validate_unique(cart)
    except ValidationError as exc:
        if "user_id" not in exc.messages:
            raise
        return find_cart(user_id)
    repo.add(cart)
    return cart
