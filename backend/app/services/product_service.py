# backend/app/services/product_service.py

"""
Capa de servicios para operaciones de negocio relacionadas con productos.

Cada operación sigue el mismo recorrido: validar la entrada, subir la imagen
si corresponde, llamar a product_crud y traducir el resultado al sobre
uniforme de respuesta (ResponseEnvelope). Ningún error previsible sale de aquí
como excepción: todos acaban en un sobre con status 304 o 500.

Responsabilidades principales:
- Puertas de validación (estructura, imagen presente, qty no negativa)
- Orquestación de la subida de imágenes con image_upload_service
- Borrado protegido del fichero de imagen al eliminar o reemplazar
- Conversión de parámetros de consulta (página 1-indexada, límites, orden)
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    FilesystemError,
    MissingImageFile,
    NotFoundError,
    PersistenceError,
    ValidationFailed,
)
from app.crud import product_crud
from app.schemas import product_schema
from app.schemas.image_schema import IncomingImage
from app.schemas.response_schema import ResponseEnvelope, validation_errors
from app.services.image_upload_service import image_upload_service

# Configurar logger
logger = logging.getLogger(__name__)


# ========================================
# CONVERSIÓN DE PARÁMETROS DE CONSULTA
# ========================================

def parse_page_index(raw: Optional[Any]) -> int:
    """Convierte la página externa (desde 1) en índice interno (desde 0)."""
    if not raw:
        return 0
    try:
        return max(int(raw) - 1, 0)
    except (TypeError, ValueError):
        return 0


def parse_limit(raw: Optional[Any], default: int) -> int:
    if not raw:
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    if limit <= 0:
        return default
    return min(limit, product_schema.INT_MAX)


def clamp_page_index(page: int, limit: int) -> int:
    """Acota la página para que page * limit quepa en un OFFSET de la base de datos."""
    return min(page, product_schema.OFFSET_MAX // limit)


def parse_sort_direction(raw: Optional[str]) -> str:
    return "desc" if raw and raw.lower() == "desc" else "asc"


class ProductService:
    """
    Servicio para las operaciones de productos expuestas por la API.

    Los métodos públicos devuelven siempre un ResponseEnvelope, salvo las
    vistas de búsqueda/orden para widgets, que devuelven la página en bruto.
    """

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def get_products(
        self,
        db: AsyncSession,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> ResponseEnvelope:
        page_size = parse_limit(limit, settings.DEFAULT_PAGE_SIZE)
        query = product_schema.ProductListQuery(
            search=search or "",
            sort=sort or "created_at",
            sort_direction=parse_sort_direction(mode),
            page=clamp_page_index(parse_page_index(page), page_size),
            limit=page_size,
        )
        logger.debug(f"📋 PRODUCTOS: Listando {query.model_dump()}")

        products = await product_crud.get_products(db, query)
        return ResponseEnvelope.ok(products.model_dump(mode="json"))

    async def search_product(self, db: AsyncSession, keyword: str, page: Optional[str] = None) -> product_schema.Page:
        return await product_crud.search_products_by_keyword(db, keyword, self._widget_page(page))

    async def sort_product_by_name(self, db: AsyncSession, page: Optional[str] = None) -> product_schema.Page:
        return await product_crud.get_products_sorted_by(db, "name", self._widget_page(page))

    async def sort_product_by_update(self, db: AsyncSession, page: Optional[str] = None) -> product_schema.Page:
        return await product_crud.get_products_sorted_by(db, "updated_at", self._widget_page(page))

    # ========================================
    # OPERACIONES DE ESCRITURA CON ORQUESTACIÓN
    # ========================================

    async def create_product(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        files: Optional[Mapping[str, IncomingImage]] = None,
    ) -> ResponseEnvelope:
        """
        Crea un producto con su imagen.

        Puertas: validación de campos, presencia del fichero bajo la clave
        "image", subida de la imagen y alta en base de datos.
        """
        try:
            product_in = product_schema.ProductCreate.model_validate(dict(fields))
        except ValidationError as e:
            logger.warning("⚠️ PRODUCTO: Alta rechazada por validación")
            return ResponseEnvelope.from_error(ValidationFailed("Validation error", validation_errors(e)))

        if not files:
            return ResponseEnvelope.from_error(MissingImageFile("No image choosen"))
        if "image" not in files:
            return ResponseEnvelope.from_error(MissingImageFile("Can't find key image"))

        upload = await image_upload_service.upload(files["image"])
        if not upload.ok:
            return ResponseEnvelope.from_error(upload.error)

        logger.info(f"🆕 PRODUCTO: Creando producto '{product_in.name}'")
        try:
            product = await product_crud.create_product(db, product_in, image=upload.filename)
        except PersistenceError:
            self._discard_image(upload.filename)
            return ResponseEnvelope.fail("Can't add product to db", 500)

        logger.info(f"✅ PRODUCTO: Creado exitosamente ID {product.id}")
        return ResponseEnvelope.ok(
            product_schema.ProductResponse(**product.to_dict()).model_dump(mode="json")
        )

    async def update_product(
        self,
        db: AsyncSession,
        product_id: int,
        fields: Mapping[str, Any],
        files: Optional[Mapping[str, IncomingImage]] = None,
    ) -> ResponseEnvelope:
        """Modificación parcial; la imagen solo cambia si llega un fichero "image"."""
        try:
            product_in = product_schema.ProductUpdate.model_validate(dict(fields))
        except ValidationError as e:
            logger.warning(f"⚠️ PRODUCTO: Actualización de ID {product_id} rechazada por validación")
            return ResponseEnvelope.from_error(ValidationFailed("Validation errors", validation_errors(e)))

        if product_in.qty < 0:
            return ResponseEnvelope.fail(
                "Quantity can't be negative",
                304,
                [{"field": "qty", "msg": "Quantity can't be negative", "type": "value_error"}],
            )

        current = await product_crud.get_product(db, product_id)
        if current is None:
            logger.error(f"❌ ERROR: Producto ID {product_id} no encontrado para actualizar")
            return ResponseEnvelope.fail("Can't update product to db", 500)
        previous_image = current.image

        patch: Dict[str, Any] = product_in.model_dump(exclude_unset=True)
        new_image: Optional[str] = None
        if files and "image" in files:
            upload = await image_upload_service.upload(files["image"])
            if not upload.ok:
                return ResponseEnvelope.from_error(upload.error)
            new_image = upload.filename
            patch["image"] = new_image

        logger.info(f"🔄 PRODUCTO: Actualizando producto ID {product_id}")
        try:
            await product_crud.update_product(db, product_id, patch)
        except (NotFoundError, PersistenceError):
            self._discard_image(new_image)
            return ResponseEnvelope.fail("Can't update product to db", 500)

        if new_image and previous_image and previous_image != new_image:
            self._discard_image(previous_image)

        logger.info(f"✅ PRODUCTO: Actualizado exitosamente ID {product_id}")
        return ResponseEnvelope.ok()

    async def delete_product(self, db: AsyncSession, product_id: int) -> ResponseEnvelope:
        """
        Elimina el producto y después su fichero de imagen.

        La fila se borra primero: si falla, la imagen sigue en disco y el
        producto queda intacto. El borrado del fichero es de mejor esfuerzo.
        """
        logger.info(f"🗑️ PRODUCTO: Eliminando producto ID {product_id}")
        try:
            deleted = await product_crud.delete_product(db, product_id)
        except (NotFoundError, PersistenceError) as e:
            logger.error(f"❌ ERROR: No se pudo eliminar el producto ID {product_id}: {e}")
            return ResponseEnvelope.fail("Can't delete product from db", 500)

        self._discard_image(deleted.image)

        logger.info(f"✅ PRODUCTO: Eliminado exitosamente ID {product_id}")
        return ResponseEnvelope.ok()

    # ========================================
    # MÉTODOS AUXILIARES
    # ========================================

    def _widget_page(self, page: Optional[str]) -> int:
        return clamp_page_index(parse_page_index(page), settings.WIDGET_PAGE_SIZE)

    def _discard_image(self, image: Optional[str]) -> bool:
        """Borra un fichero del directorio de imágenes sin propagar errores."""
        if not image:
            return False
        try:
            return self._remove_image_file(image)
        except FilesystemError as e:
            logger.error(f"❌ ERROR: {e.message}: {image}", exc_info=True)
            return False

    def _remove_image_file(self, image: str) -> bool:
        path = image_upload_service.upload_dir / Path(image).name
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"⚠️ IMAGEN: '{image}' no existe en {path.parent}")
            return False
        except OSError as e:
            raise FilesystemError() from e
        return True


# ========================================
# INSTANCIA SINGLETON DEL SERVICIO
# ========================================

# Instancia única del servicio para ser usada en toda la aplicación
product_service = ProductService()
