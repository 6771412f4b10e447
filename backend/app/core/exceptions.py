# backend/app/core/exceptions.py
"""
Excepciones de dominio del catálogo.

Cada excepción conoce el código de estado que se publica dentro del sobre
JSON de respuesta (el código HTTP de transporte es siempre 200). La capa de
servicios las convierte en ResponseEnvelope; ninguna llega al cliente en crudo.
"""

from typing import Any, Dict, List, Optional, Union


class CatalogError(Exception):
    """Error base del catálogo."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Union[bool, List[Dict[str, Any]]] = True,
    ):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


# ========================================
# ERRORES DE ENTRADA (304)
# ========================================

class ValidationFailed(CatalogError):
    status_code = 304
    default_message = "Validation error"


class UnsupportedMediaType(CatalogError):
    """El subtipo del media type no está en la lista de imágenes permitidas."""
    status_code = 304

    def __init__(self, subtype: str):
        self.subtype = subtype
        super().__init__(f"please upload an image file not {subtype} file")


class MissingImageFile(CatalogError):
    status_code = 304
    default_message = "No image choosen"


# ========================================
# ERRORES DE ALMACENAMIENTO (500)
# ========================================

class StorageWriteFailed(CatalogError):
    default_message = "can't upload image"


class PersistenceError(CatalogError):
    default_message = "Can't write product to db"


class NotFoundError(CatalogError):
    default_message = "Product not found"


class FilesystemError(CatalogError):
    default_message = "Can't remove image file"
