# backend/app/schemas/response_schema.py
"""
Sobre uniforme de respuesta de la API.

Todas las operaciones de productos devuelven esta misma forma. El código HTTP de
transporte es siempre 200; el resultado real viaja en el campo status.
"""

from typing import Any, Dict, List, Union
from pydantic import BaseModel, Field, ValidationError

from app.core.exceptions import CatalogError


class ResponseEnvelope(BaseModel):
    message: str
    status: int
    data: Any = Field(default_factory=dict)
    errors: Union[bool, List[Dict[str, Any]]] = False

    @classmethod
    def ok(cls, data: Any = None) -> "ResponseEnvelope":
        return cls(message="OKE", status=200, data=data if data is not None else {}, errors=False)

    @classmethod
    def fail(cls, message: str, status: int, errors: Union[bool, List[Dict[str, Any]]] = True) -> "ResponseEnvelope":
        return cls(message=message, status=status, data={}, errors=errors)

    @classmethod
    def from_error(cls, error: CatalogError) -> "ResponseEnvelope":
        return cls.fail(error.message, error.status_code, error.errors)


def validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """Aplana los errores de Pydantic en una lista serializable a JSON."""
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
