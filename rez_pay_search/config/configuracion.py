"""
Configuración del coordinador de búsqueda de tiendas (Pay-In-Store).

Centraliza las variables de configuración del cliente de búsqueda. Utiliza
pydantic-settings para validación y manejo de variables de entorno, con
soporte para archivos .env.

Variables de entorno soportadas (prefijo REZ_):
- REZ_API_BASE_URL: URL base del backend REST. Default: http://localhost:5001/api
- REZ_HTTP_TIMEOUT_SECONDS: Timeout de cada llamada HTTP. Default: 10
- REZ_DEBOUNCE_DELAY_SECONDS: Pausa de tecleo antes de buscar. Default: 0.3
- REZ_DEFAULT_RADIUS_KM: Radio de búsqueda por ubicación. Default: 10
- REZ_DEFAULT_PAGE_SIZE: Tamaño de página de resultados. Default: 20
- REZ_NEARBY_LIMIT / REZ_RECENT_LIMIT / REZ_POPULAR_LIMIT: Límites por sección
- REZ_RECENT_HYDRATION_CAP: Máximo de tiendas recientes a hidratar. Default: 5
- REZ_LOG_LEVEL: Nivel de logging (DEBUG, INFO, WARNING, ERROR). Default: INFO
- REZ_LOG_FORMAT: "json" o "human". Default: json
- REZ_METRICS_ENABLED: Activa métricas de performance. Default: true
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfiguracionBusqueda(BaseSettings):
    """
    Configuración centralizada del coordinador de búsqueda.

    Los componentes reciben una instancia explícita; la instancia global
    solo se usa como valor por defecto.
    """

    # Backend
    api_base_url: str = "http://localhost:5001/api"
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Búsqueda
    debounce_delay_seconds: float = Field(default=0.3, ge=0)
    default_radius_km: int = Field(default=10, ge=1)
    default_page_size: int = Field(default=20, ge=1, le=100)

    # Secciones
    nearby_limit: int = Field(default=10, ge=1)
    recent_limit: int = Field(default=10, ge=1)
    recent_hydration_cap: int = Field(default=5, ge=1)
    popular_limit: int = Field(default=10, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Métricas
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_prefix="REZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Instancia global de configuración
configuracion = ConfiguracionBusqueda()
