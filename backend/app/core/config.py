# backend/app/core/config.py
"""
Este archivo contiene la configuración de la aplicación.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path
import os

# Apunta al directorio 'backend/'
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic BaseSettings.
    Variables sensibles desde .env, defaults seguros para el resto.
    """
    # Configuración general del proyecto
    BASE_DIR: Path = BASE_DIR
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Catalogo API"
    PROJECT_VERSION: str = "0.1.0"

    # Configuración de la base de datos
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "postgres")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "user")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "catalog_db")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")

    # URL completa opcional (p.ej. sqlite+aiosqlite para desarrollo local)
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Crear las tablas al arrancar si no existen
    DB_CREATE_TABLES: bool = True

    @property
    def DATABASE_URL(self) -> str:
        """URL de conexión a la base de datos asíncrona."""
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Imágenes de producto
    IMAGE_UPLOAD_DIR: Path = BASE_DIR / "public" / "images"
    IMAGE_URL_PREFIX: str = "/images"
    # Comparación exacta, sin pasar a minúsculas
    ALLOWED_IMAGE_SUBTYPES: List[str] = ["png", "jpg", "jpeg", "svg", "gif"]

    # Paginación
    DEFAULT_PAGE_SIZE: int = 12
    WIDGET_PAGE_SIZE: int = 2  # Widgets de búsqueda/orden en línea

    # Logging - Defaults seguros
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        case_sensitive = False

# Instancia global de la configuración
settings = Settings()
