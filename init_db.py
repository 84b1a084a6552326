from decimal import Decimal

from core.config import load_settings
from core.db import Base, make_engine, make_session_factory
from core.logger import get_logger
from models.user import User  # noqa: F401
from models.product import Product
from models.order import Order, OrderItem  # noqa: F401
from models.cart import Cart  # noqa: F401

_logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {"name": "Classic Cotton Tee", "description": "Soft crew-neck t-shirt.", "category": "Apparel", "price": Decimal("14.99"), "image": "/images/tee.jpg"},
    {"name": "Canvas Tote Bag", "description": "Heavy canvas tote with inner pocket.", "category": "Accessories", "price": Decimal("19.50"), "image": "/images/tote.jpg"},
    {"name": "Ceramic Mug", "description": "350 ml stoneware mug.", "category": "Home", "price": Decimal("9.99"), "image": "/images/mug.jpg"},
    {"name": "Wireless Earbuds", "description": "Bluetooth earbuds with charging case.", "category": "Electronics", "price": Decimal("49.00"), "image": "/images/earbuds.jpg"},
    {"name": "Leather Wallet", "description": "Slim bifold wallet.", "category": "Accessories", "price": Decimal("29.95"), "image": "/images/wallet.jpg"},
    {"name": "Desk Lamp", "description": "LED lamp with adjustable arm.", "category": "Home", "price": Decimal("34.00"), "image": "/images/lamp.jpg"},
]

def seed_products(db):
    if db.query(Product).first():
        _logger.info("Products already seeded.")
        return 0
    db.add_all(Product(**p) for p in SAMPLE_PRODUCTS)
    db.commit()
    _logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} sample products.")
    return len(SAMPLE_PRODUCTS)

def create_tables(engine, drop=False):
    if drop:
        _logger.info("Rebuilding database (drop/create)...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    _logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")

def init_db(engine, drop=False):
    create_tables(engine, drop=drop)
    db = make_session_factory(engine)()
    try:
        seed_products(db)
    finally:
        db.close()

if __name__ == "__main__":
    settings = load_settings()
    engine = make_engine(settings.database_url, settings.db_timeout)
    init_db(engine, drop=True)
    engine.dispose()
    _logger.info("Database initialization complete!")
