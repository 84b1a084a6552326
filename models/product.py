# models/product.py
from sqlalchemy import Column, Integer, String, Numeric
from core.db import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(1000))
    category = Column(String(100))
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)  # image url or static path
