# backend/app/crud/product_crud.py

"""
Operaciones CRUD para el modelo Product.

Este módulo concentra todo el acceso a la tabla products: listado con la
categoría unida, filtrado, ordenación y paginación, además de las escrituras
(alta, modificación parcial y baja) con comprobación de existencia previa.

Funcionalidades principales:
- Un único punto (_build_listing) que traduce ProductListQuery a SQL
- Unión con categories para exponer el nombre de la categoría
- qty siempre a 0 en el alta y nunca negativa en las modificaciones
- Vistas reducidas de búsqueda/orden, solo sobre products, con página fija
  de WIDGET_PAGE_SIZE

Los fallos se señalan con NotFoundError y PersistenceError en lugar de
devolver None, para que el llamador tenga que tratarlos explícitamente.
"""

from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError, PersistenceError
from app.db.models.category_model import Category
from app.db.models.product_model import Product
from app.schemas import product_schema

import logging

logger = logging.getLogger(__name__)

# Columnas por las que se puede ordenar además de "category"
SORTABLE_COLUMNS = {column.key: column for column in Product.__table__.columns}
DEFAULT_SORT = "created_at"

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    """Obtiene un producto por su ID."""
    result = await db.execute(select(Product).filter(Product.id == product_id))
    return result.scalars().first()


def _build_listing(query: product_schema.ProductListQuery, with_category: bool = True):
    """
    Traduce la consulta de listado a dos sentencias: la página y el total.

    Con with_category, sort="category" ordena por el nombre de la categoría
    unida, no por category_id. Sin él solo se consulta products, y un producto
    cuya categoría no existe también aparece. Un nombre de columna desconocido
    cae en created_at.
    """
    condition = Product.name.ilike(f"%{query.search}%")

    if with_category and query.sort == "category":
        order_column = Category.name
    else:
        order_column = SORTABLE_COLUMNS.get(query.sort, SORTABLE_COLUMNS[DEFAULT_SORT])
    ordering = order_column.desc() if query.sort_direction == "desc" else order_column.asc()

    if with_category:
        rows = select(Product, Category.name.label("category")).join(Category, Product.category_id == Category.id)
        total = select(func.count(Product.id)).select_from(Product).join(Category, Product.category_id == Category.id)
    else:
        rows = select(Product)
        total = select(func.count(Product.id)).select_from(Product)

    rows = (
        rows.filter(condition)
        .order_by(ordering, Product.id.asc())
        .offset(query.page * query.limit)
        .limit(query.limit)
    )
    return rows, total.filter(condition)


async def get_products(db: AsyncSession, query: product_schema.ProductListQuery) -> product_schema.CategoryPage:
    """Obtiene una página filtrada y ordenada de productos con su categoría."""
    rows_stmt, total_stmt = _build_listing(query)

    rows = await db.execute(rows_stmt)
    total = await db.execute(total_stmt)

    results = [
        product_schema.ProductWithCategory(**product.to_dict(), category=category)
        for product, category in rows.all()
    ]
    return product_schema.CategoryPage(
        results=results,
        total=total.scalar_one(),
        page=query.page,
        limit=query.limit,
    )


async def _get_widget_page(db: AsyncSession, query: product_schema.ProductListQuery) -> product_schema.Page:
    rows_stmt, total_stmt = _build_listing(query, with_category=False)

    rows = await db.execute(rows_stmt)
    total = await db.execute(total_stmt)

    return product_schema.Page(
        results=[product_schema.ProductResponse(**product.to_dict()) for product in rows.scalars().all()],
        total=total.scalar_one(),
        page=query.page,
        limit=query.limit,
    )


async def search_products_by_keyword(db: AsyncSession, keyword: str, page: int = 0) -> product_schema.Page:
    """Búsqueda por nombre ordenada alfabéticamente, en páginas de WIDGET_PAGE_SIZE."""
    query = product_schema.ProductListQuery(
        search=keyword or "", sort="name", page=page, limit=settings.WIDGET_PAGE_SIZE
    )
    return await _get_widget_page(db, query)


async def get_products_sorted_by(db: AsyncSession, field: str, page: int = 0) -> product_schema.Page:
    """Listado completo ordenado por field, en páginas de WIDGET_PAGE_SIZE."""
    query = product_schema.ProductListQuery(sort=field, page=page, limit=settings.WIDGET_PAGE_SIZE)
    return await _get_widget_page(db, query)


# ========================================
# OPERACIONES DE ESCRITURA (CREATE, UPDATE, DELETE)
# ========================================

async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error al {action} el producto: {e}", exc_info=True)
        raise PersistenceError(f"Can't {action} product") from e


async def create_product(
    db: AsyncSession,
    product_data: product_schema.ProductCreate,
    image: Optional[str] = None,
) -> Product:
    """Crea un nuevo producto. qty siempre empieza en 0."""
    db_product = Product(
        name=product_data.name,
        description=product_data.description,
        image=image,
        category_id=product_data.category_id,
        price=product_data.price,
        qty=0,
    )

    db.add(db_product)
    await _commit(db, "create")
    await db.refresh(db_product)

    if db_product.id is None:
        raise PersistenceError("Product was not persisted")
    return db_product


async def update_product(db: AsyncSession, product_id: int, fields: Dict[str, Any]) -> Product:
    """
    Modificación parcial: solo cambian las claves presentes en fields.

    image solo debe venir en fields si se ha subido una imagen nueva en esta
    petición; si no, la imagen guardada no se toca.
    """
    db_product = await get_product(db, product_id)
    if not db_product:
        raise NotFoundError(f"Product {product_id} not found")

    if fields.get("qty") is not None and fields["qty"] < 0:
        fields = {**fields, "qty": 0}

    for key, value in fields.items():
        setattr(db_product, key, value)

    await _commit(db, "update")
    await db.refresh(db_product)
    return db_product


async def delete_product(db: AsyncSession, product_id: int) -> Product:
    """
    Elimina un producto y devuelve la fila borrada.

    La fila se lee antes de borrarla para que el llamador conozca su image.
    """
    db_product = await get_product(db, product_id)
    if not db_product:
        raise NotFoundError(f"Product {product_id} not found")

    await db.delete(db_product)
    await _commit(db, "delete")
    return db_product
