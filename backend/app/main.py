# backend/app/main.py
"""
Punto de entrada principal de la aplicación FastAPI.

Este módulo configura y inicializa la aplicación FastAPI completa,
incluyendo el logging, el registro de rutas, el servido estático de las
imágenes de producto y los eventos del ciclo de vida de la aplicación.
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import deps
from app.core.config import Settings, settings  # Configuración centralizada de la aplicación
from app.api.v1.api_router import api_router_v1  # Router principal de la API v1
from app.db.database import init_db
from app.services.image_upload_service import image_upload_service

# ========================================
# CONFIGURACIÓN DE LOGGING
# ========================================

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format=settings.LOG_FORMAT,
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

# ========================================
# CONFIGURACIÓN DE LA APLICACIÓN FASTAPI
# ========================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    description="API del catálogo de productos"
)

# Prefijo típico "/api/v1"
app.include_router(api_router_v1, prefix=settings.API_V1_STR)

# Las imágenes se sirven con el mismo nombre con el que se guardan
app.mount(
    settings.IMAGE_URL_PREFIX,
    StaticFiles(directory=str(image_upload_service.upload_dir), check_dir=False),
    name="images",
)


# ========================================
# ENDPOINTS RAÍZ Y VERIFICACIÓN DE ESTADO
# ========================================

@app.get("/", tags=["Root"])
async def read_root(app_settings: Settings = Depends(deps.get_settings)):
    """
    Endpoint raíz para verificación básica del estado de la API.

    Returns:
        dict: Mensaje de bienvenida con información del proyecto

    Example:
        GET /
        Response: {"message": "Bienvenido a Catalogo API v0.1.0"}
    """
    return {"message": f"Bienvenido a {app_settings.PROJECT_NAME} v{app_settings.PROJECT_VERSION}"}


# ========================================
# EVENTOS DEL CICLO DE VIDA DE LA APLICACIÓN
# ========================================

@app.on_event("startup")
async def startup_event():
    """
    Evento ejecutado al iniciar la aplicación.

    Tareas de inicialización:
    - Crear el directorio de imágenes si no existe
    - Crear las tablas de la base de datos (si DB_CREATE_TABLES está activo)
    """
    upload_dir = image_upload_service.ensure_upload_dir()
    logger.info(f"📁 Directorio de imágenes: {upload_dir}")

    if settings.DB_CREATE_TABLES:
        await init_db()
