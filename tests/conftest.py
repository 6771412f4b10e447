"""
Fixtures compartidas: base de datos SQLite en disco por test, directorio de
imágenes temporal y cliente HTTP sobre la aplicación ASGI.
"""

import os

# Antes de importar la aplicación: el motor global no debe apuntar a PostgreSQL
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite+aiosqlite:///./test_catalog.db")
os.environ.setdefault("DB_CREATE_TABLES", "false")

from datetime import datetime
from typing import Any, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.api import deps
from app.core.config import settings
from app.db.database import Base
from app.db.models.category_model import Category
from app.db.models.product_model import Product
from app.main import app


@pytest.fixture
def image_dir(tmp_path, monkeypatch):
    path = tmp_path / "images"
    path.mkdir()
    monkeypatch.setattr(settings, "IMAGE_UPLOAD_DIR", path)
    return path


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def categories(db):
    """Tres categorías cuyo orden por nombre es el inverso de su orden por ID."""
    rows = [
        Category(id=1, name="Tools"),
        Category(id=2, name="Garden"),
        Category(id=3, name="Appliances"),
    ]
    db.add_all(rows)
    await db.commit()
    return {row.name: row for row in rows}


@pytest.fixture
def make_product(db, categories):
    async def _make(
        name: str,
        category_id: int = 1,
        image: Optional[str] = None,
        qty: int = 0,
        price: float = 10.0,
        updated_at: Optional[datetime] = None,
        **extra: Any,
    ) -> Product:
        product = Product(
            name=name,
            description=f"{name} description",
            image=image,
            category_id=category_id,
            price=price,
            qty=qty,
            **extra,
        )
        if updated_at is not None:
            product.updated_at = updated_at
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    return _make


@pytest.fixture
async def client(session_factory, image_dir):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
