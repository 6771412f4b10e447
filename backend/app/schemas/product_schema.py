# backend/app/schemas/product_schema.py
"""
Esquemas Pydantic para el modelo Product.

Los esquemas de entrada (ProductCreate, ProductUpdate) reciben los campos de
un formulario multipart, por eso todos los valores llegan como texto y Pydantic
se encarga de la conversión de tipos.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

# Rangos de las columnas: Integer con signo de 32 bits, Numeric(10, 2) y
# OFFSET de 64 bits
INT_MAX = 2**31 - 1
DbInt = Annotated[int, Field(ge=-INT_MAX - 1, le=INT_MAX)]
PRICE_MAX = 99_999_999.99
OFFSET_MAX = 2**63 - 1

# ========================================
# ESQUEMA BASE
# ========================================

class ProductBase(BaseModel):
    """Propiedades comunes compartidas entre esquemas de producto."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category_id: DbInt
    price: float = Field(..., ge=0, le=PRICE_MAX, allow_inf_nan=False)


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class ProductCreate(ProductBase):
    """
    Esquema para crear un nuevo producto.

    No admite qty: un producto nuevo siempre nace con existencias a cero.
    """


class ProductUpdate(ProductBase):
    """Esquema para actualizar un producto. Todos los campos salvo qty son opcionales."""
    name: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[DbInt] = None
    price: Optional[float] = Field(default=None, ge=0, le=PRICE_MAX, allow_inf_nan=False)
    # Sin ge=0: el servicio rechaza los negativos con su propio mensaje
    qty: DbInt


# ========================================
# ESQUEMAS DE RESPUESTA
# ========================================

class ProductResponse(BaseModel):
    """Esquema de respuesta para un producto tal como está persistido."""
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    category_id: int
    price: float
    qty: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductWithCategory(ProductResponse):
    """Producto con el nombre de su categoría unido desde la tabla categories."""
    category: str


# ========================================
# CONSULTA DE LISTADO Y PÁGINA
# ========================================

class ProductListQuery(BaseModel):
    """
    Especificación explícita de un listado de productos.

    Reúne filtro, orden y paginación en un solo objeto que product_crud traduce
    a SQL en un único lugar. page está indexado desde 0.
    """
    search: str = ""
    sort: str = "created_at"
    sort_direction: Literal["asc", "desc"] = "asc"
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=12, gt=0, le=INT_MAX)

    @model_validator(mode="after")
    def offset_in_range(self):
        if self.page * self.limit > OFFSET_MAX:
            raise ValueError("page * limit exceeds the maximum offset")
        return self


class Page(BaseModel):
    """Porción de resultados más los parámetros que la produjeron."""
    results: List[ProductResponse] = []
    total: int = 0
    page: int = 0
    limit: int = 12


class CategoryPage(Page):
    """Página del listado principal, con el nombre de la categoría en cada fila."""
    results: List[ProductWithCategory] = []
