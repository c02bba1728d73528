"""
Centralized configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Application
    APP_NAME: str = "os-extractor"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    
    # Batch input
    DOCS_ROOT: str = "docs"
    DOC_EXTENSIONS: list[str] = [".docx", ".pdf"]

    # Stores
    FLEET_REGISTRY_PATH: str = "data/frota.csv"
    SERVICE_ORDERS_PATH: str = "output/ordens_servico.csv"
    ERROR_LOG_PATH: str = "erros.json"

    # Memo template anchors
    CITY_ANCHOR: str = "Fortaleza"
    VEHICLE_CLAUSE_ANCHOR: str = "Solicito de V. Sª. que seja efetuado o pagamento da ordem de serviço"
    
    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


def configure_logging(config: "Settings") -> None:
    """Configura o logger raiz uma única vez (arquivo se LOG_FILE, senão stderr)."""
    logging.basicConfig(
        filename=config.LOG_FILE,
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(message)s'
    )


# Global settings instance
settings = Settings()
