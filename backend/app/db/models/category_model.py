# backend/app/db/models/category_model.py
"""
Se encarga de definir el modelo de categoría para la aplicación.

Las categorías se gestionan fuera de este servicio; aquí solo se mapea la tabla
para poder unirla a los productos y leer su nombre.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from app.db.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    products = relationship("Product", back_populates="category")
