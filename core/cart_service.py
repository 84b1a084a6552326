from sqlalchemy import func
from sqlalchemy.orm import Session
from models.cart import Cart
from models.product import Product
from core.db import insert_on_conflict, store_errors

def _to_quantity(val) -> int:
    """Parse a requested quantity; anything missing, non-numeric or below 1 becomes 1."""
    try:
        qty = int(val)
    except (TypeError, ValueError):
        return 1
    return qty if qty > 0 else 1

def get_user_cart(db: Session, user_id: int):
    """Cart lines for a user joined with the current product name and price"""
    with store_errors(db, "read the cart"):
        rows = (
            db.query(Cart.id, Cart.product_id, Product.name, Product.price, Cart.quantity)
            .join(Product, Cart.product_id == Product.id)
            .filter(Cart.user_id == user_id)
            .order_by(Cart.id)
            .all()
        )
    return [
        {
            "cart_id": row.id,
            "product_id": row.product_id,
            "name": row.name,
            "price": row.price,
            "quantity": row.quantity,
            "total": row.price * row.quantity,
        }
        for row in rows
    ]

def add_to_cart(db: Session, user_id: int, product_id: int, quantity=1):
    """Add a product or bump the quantity of its existing line.

    Returns the resulting cart line, or None when the product does not exist.
    """
    quantity = _to_quantity(quantity)
    with store_errors(db, "add to cart"):
        if db.get(Product, product_id) is None:
            return None
        # Single statement upsert so concurrent adds never create a second line
        insert_on_conflict(
            db,
            Cart,
            {"user_id": user_id, "product_id": product_id, "quantity": quantity},
            conflict_columns=["user_id", "product_id"],
            increment=["quantity"],
        )
        db.commit()
        return db.query(Cart).filter(
            Cart.user_id == user_id,
            Cart.product_id == product_id
        ).first()

def remove_from_cart(db: Session, user_id: int, cart_id: int):
    """Remove one of the user's cart lines. Unknown or foreign lines are ignored."""
    with store_errors(db, "remove from cart"):
        deleted = db.query(Cart).filter(
            Cart.id == cart_id,
            Cart.user_id == user_id
        ).delete(synchronize_session=False)
        db.commit()
    return deleted > 0

def get_cart_count(db: Session, user_id: int):
    """Get total number of items in cart"""
    with store_errors(db, "count cart items"):
        count = db.query(func.sum(Cart.quantity)).filter(Cart.user_id == user_id).scalar()
    return count or 0
