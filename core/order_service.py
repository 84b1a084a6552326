"""
Checkout: turns a user's cart into an order.

place_order runs as one transaction. The order row, its line items and the
removal of the ordered cart lines are committed together or not at all.
"""
from decimal import Decimal

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from models.cart import Cart
from models.order import Order, OrderItem
from models.user import User
from core.cart_service import get_user_cart
from core.db import store_errors
from core.errors import CartChangedError, EmptyCartError
from core.logger import get_logger

_logger = get_logger(__name__)

SHIPPING_FIELDS = ("full_name", "phone_number", "address", "city", "province")


def order_total(lines) -> Decimal:
    return sum((line["price"] * line["quantity"] for line in lines), Decimal("0.00"))


def checkout_summary(db: Session, user_id: int):
    """Return (lines, total) for the checkout page."""
    lines = get_user_cart(db, user_id)
    return lines, order_total(lines)


def _lock_user(db: Session, user_id: int):
    # Serialises checkouts of one user on dialects with row locks
    db.query(User.id).filter(User.id == user_id).with_for_update().first()


def _create_order(db: Session, user_id: int, shipping: dict, payment_method: str, total: Decimal) -> Order:
    order = Order(
        user_id=user_id,
        total_amount=total,
        payment_method=payment_method or "",
        **{field: shipping.get(field) or "" for field in SHIPPING_FIELDS},
    )
    db.add(order)
    db.flush()
    return order


def _write_order_lines(db: Session, order: Order, lines):
    db.add_all(
        OrderItem(
            order_id=order.id,
            product_id=line["product_id"],
            quantity=line["quantity"],
            price=line["price"],
        )
        for line in lines
    )
    db.flush()


def _clear_ordered_lines(db: Session, user_id: int, lines):
    """Delete exactly the cart rows that were ordered, as they were read."""
    matches = or_(*(
        and_(Cart.id == line["cart_id"], Cart.quantity == line["quantity"])
        for line in lines
    ))
    deleted = db.query(Cart).filter(Cart.user_id == user_id, matches).delete(
        synchronize_session=False
    )
    if deleted != len(lines):
        raise CartChangedError()


def place_order(db: Session, user_id: int, shipping: dict, payment_method: str) -> Order:
    """
    Place an order from everything in the user's cart.

    Raises EmptyCartError when the cart has no lines, CartChangedError when
    the cart was modified by a concurrent request, StoreError or
    StoreUnavailable when the database fails. Nothing is written in any of
    these cases.
    """
    with store_errors(db, "place an order"):
        _lock_user(db, user_id)
        lines = get_user_cart(db, user_id)
        if not lines:
            raise EmptyCartError()

        total = order_total(lines)
        order = _create_order(db, user_id, shipping, payment_method, total)
        _write_order_lines(db, order, lines)
        _clear_ordered_lines(db, user_id, lines)
        db.commit()

    _logger.info(f"Order #{order.id} placed by user {user_id}: {len(lines)} lines, total {total}")
    return order


def list_orders(db: Session, user_id: int):
    with store_errors(db, "list orders"):
        return (
            db.query(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
