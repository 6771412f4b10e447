# backend/app/api/v1/endpoints/products.py

"""
Endpoints REST para el listado y las operaciones CRUD de productos.

Todas las rutas responden con HTTP 200 y el sobre uniforme; el resultado real
viaja en el campo status del cuerpo. Los formularios multipart se leen a mano
para poder distinguir "sin ficheros" de "ficheros sin la clave image".
"""

from typing import Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile
import logging

from app.api import deps
from app.schemas.image_schema import IncomingImage
from app.schemas.response_schema import ResponseEnvelope
from app.services.product_service import product_service

logger = logging.getLogger(__name__)
router = APIRouter()


def split_form(form: FormData) -> Tuple[Dict[str, str], Dict[str, IncomingImage]]:
    """
    Separa los campos de texto de los ficheros de un formulario.

    Un navegador envía los campos de fichero sin seleccionar como una parte
    vacía con filename=""; esas partes se descartan.
    """
    fields: Dict[str, str] = {}
    files: Dict[str, IncomingImage] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if not value.filename:
                continue
            files[key] = IncomingImage.from_upload(value)
        else:
            fields[key] = value
    return fields, files


@router.get("", response_model=ResponseEnvelope)
async def read_products(
    db: AsyncSession = Depends(deps.get_db),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    mode: Optional[str] = None,
) -> ResponseEnvelope:
    """Obtiene una página de productos filtrada por nombre y ordenada."""
    return await product_service.get_products(
        db, page=page, limit=limit, search=search, sort=sort, mode=mode
    )


@router.post("", response_model=ResponseEnvelope)
async def create_product(
    request: Request,
    db: AsyncSession = Depends(deps.get_db),
) -> ResponseEnvelope:
    """Crea un nuevo producto con imagen (multipart/form-data)."""
    async with request.form() as form:
        fields, files = split_form(form)
        return await product_service.create_product(db, fields=fields, files=files)


@router.put("/{product_id}", response_model=ResponseEnvelope)
async def update_product(
    product_id: int,
    request: Request,
    db: AsyncSession = Depends(deps.get_db),
) -> ResponseEnvelope:
    """Actualiza un producto existente; la imagen es opcional."""
    async with request.form() as form:
        fields, files = split_form(form)
        return await product_service.update_product(db, product_id, fields=fields, files=files)


@router.delete("/{product_id}", response_model=ResponseEnvelope)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db),
) -> ResponseEnvelope:
    """Elimina un producto junto con su fichero de imagen."""
    return await product_service.delete_product(db, product_id)
