# backend/app/services/image_upload_service.py
"""
Servicio de subida de imágenes de producto.

Valida el subtipo del media type declarado contra la lista de formatos
permitidos, genera un nombre aleatorio (uuid4) y guarda el fichero en el
directorio de imágenes configurado. El nombre original se descarta por completo.

Este servicio nunca lanza excepciones por una subida rechazada: devuelve un
ImageUploadResult con el error correspondiente. Borrar imágenes no es
responsabilidad suya.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import StorageWriteFailed, UnsupportedMediaType
from app.schemas.image_schema import ImageUploadResult, IncomingImage

logger = logging.getLogger(__name__)


class ImageUploadService:
    """Guarda imágenes subidas en el directorio de almacenamiento."""

    def __init__(self, upload_dir: Optional[Path] = None):
        self._upload_dir = upload_dir

    @property
    def upload_dir(self) -> Path:
        return Path(self._upload_dir or settings.IMAGE_UPLOAD_DIR)

    def ensure_upload_dir(self) -> Path:
        os.makedirs(self.upload_dir, mode=0o755, exist_ok=True)
        return self.upload_dir

    async def upload(self, image: IncomingImage) -> ImageUploadResult:
        subtype = image.subtype
        if subtype not in settings.ALLOWED_IMAGE_SUBTYPES:
            logger.warning(f"⚠️ IMAGEN: Formato rechazado '{subtype}' ({image.filename})")
            return ImageUploadResult(error=UnsupportedMediaType(subtype))

        image_name = f"{uuid.uuid4()}.{subtype}"
        destination = self.upload_dir / image_name

        try:
            self.ensure_upload_dir()
            moved = await run_in_threadpool(image.move_to, destination)
        except OSError as e:
            logger.error(f"❌ ERROR: No se pudo guardar la imagen {image_name}: {e}", exc_info=True)
            moved = False

        if not moved:
            destination.unlink(missing_ok=True)
            return ImageUploadResult(error=StorageWriteFailed())

        logger.info(f"🖼️ IMAGEN: Guardada '{image_name}'")
        return ImageUploadResult(filename=image_name)


# Instancia única del servicio para ser usada en toda la aplicación
image_upload_service = ImageUploadService()
