# backend/app/db/models/product_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Text, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func # Para CURRENT_TIMESTAMP

from app.db.database import Base
from app.db.models.category_model import Category  # noqa: F401  registra la relación

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    # Nombre del fichero dentro de IMAGE_UPLOAD_DIR, no una clave foránea
    image = Column(String(255), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    qty = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="products")

    def to_dict(self):
        """Convierte el objeto Product en un diccionario."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "category_id": self.category_id,
            "price": float(self.price) if self.price is not None else 0.0,
            "qty": self.qty,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
