# backend/app/schemas/image_schema.py
"""
Se encarga de definir los tipos de valor para las imágenes subidas.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from starlette.datastructures import UploadFile

from app.core.exceptions import CatalogError

# ========================================
# FICHERO ENTRANTE
# ========================================

@dataclass(frozen=True)
class IncomingImage:
    """Fichero recibido en una petición: media type declarado y contenido."""
    content_type: str
    filename: Optional[str]
    file: BinaryIO

    @classmethod
    def from_upload(cls, upload: UploadFile) -> "IncomingImage":
        return cls(
            content_type=upload.content_type or "",
            filename=upload.filename,
            file=upload.file,
        )

    @property
    def subtype(self) -> str:
        """Parte del media type posterior a '/' (cadena vacía si no hay '/')."""
        _, _, subtype = self.content_type.partition("/")
        return subtype

    def move_to(self, destination: Path) -> bool:
        """Copia el contenido a destination. Bloqueante."""
        self.file.seek(0)
        with open(destination, "wb") as target:
            shutil.copyfileobj(self.file, target)
        return True


# ========================================
# RESULTADO DE LA SUBIDA
# ========================================

@dataclass(frozen=True)
class ImageUploadResult:
    """Nombre del fichero guardado, o el error que impidió guardarlo."""
    filename: Optional[str] = None
    error: Optional[CatalogError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.filename is not None
