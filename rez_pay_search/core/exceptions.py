"""Excepciones del dominio para el coordinador de búsqueda de tiendas."""

from typing import Optional


class StoreApiError(Exception):
    """Error base en llamadas al backend de tiendas."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StoreApiHttpError(StoreApiError):
    """El backend respondió con un status no exitoso."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP error! status: {status_code} ({url})", status_code)
        self.url = url


class StoreApiTimeoutError(StoreApiError):
    """Timeout esperando respuesta del backend."""
    pass


class StoreApiResponseError(StoreApiError):
    """Respuesta con JSON inválido o que no cumple el schema esperado."""
    pass


class SearchCancelledError(Exception):
    """La búsqueda fue reemplazada por una más reciente."""
    pass


class InvalidLocationError(ValueError):
    """Coordenadas ausentes o no numéricas."""

    def __init__(self, latitude=None, longitude=None):
        super().__init__(f"Invalid location: lat={latitude}, lon={longitude}")
        self.latitude = latitude
        self.longitude = longitude
