# core/catalog_service.py
from sqlalchemy.orm import Session
from models.product import Product
from core.db import store_errors


def list_products(db: Session):
    with store_errors(db, "list products"):
        return db.query(Product).order_by(Product.id).all()


def get_product(db: Session, product_id: int):
    with store_errors(db, "fetch a product"):
        return db.get(Product, product_id)
