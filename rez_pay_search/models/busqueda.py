"""
Modelos de la búsqueda de tiendas: ubicación, sesión, errores, filtros.
"""

import math
import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.exceptions import InvalidLocationError

# Categoría que significa "todas las tiendas"
CATEGORY_ALL = "all"


class SortBy(str, Enum):
    """Criterios de orden aceptados por el backend."""

    RATING = "rating"
    DISTANCE = "distance"


class StoreTab(str, Enum):
    """Pestañas de la pantalla de búsqueda."""

    ALL = "all"
    BRANDS = "brands"
    LOCAL = "local"
    SERVICES = "services"


class SearchErrorCode(str, Enum):
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    LOCATION_ERROR = "LOCATION_ERROR"


class SearchError(BaseModel):
    """Error de búsqueda presentable en la UI, con bandera de reintento."""

    model_config = ConfigDict(frozen=True)

    code: SearchErrorCode = SearchErrorCode.SERVER_ERROR
    message: str = "Failed to search stores"
    recoverable: bool = True


class UserLocation(BaseModel):
    """Ubicación del dispositivo. Solo se reemplaza; nunca expira."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    timestamp: float = Field(default_factory=lambda: time.time() * 1000)

    @field_validator("latitude", "longitude")
    @classmethod
    def coordenada_finita(cls, value: float) -> float:
        if math.isnan(value) or math.isinf(value):
            raise ValueError("coordinate must be a finite number")
        return value

    @classmethod
    def from_coordinates(cls, latitude, longitude) -> "UserLocation":
        """
        Construye una ubicación validando que ambas coordenadas sean numéricas.

        Raises:
            InvalidLocationError: si alguna coordenada falta, no es numérica o es NaN
        """
        for valor in (latitude, longitude):
            if isinstance(valor, bool) or not isinstance(valor, (int, float)):
                raise InvalidLocationError(latitude, longitude)
            if math.isnan(valor) or math.isinf(valor):
                raise InvalidLocationError(latitude, longitude)
        return cls(latitude=latitude, longitude=longitude)

    def to_api_param(self) -> str:
        """Formato "lon,lat" que espera el backend."""
        return f"{self.longitude},{self.latitude}"


class SesionUsuario(BaseModel):
    """Estado de autenticación visto por el coordinador."""

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    token: Optional[str] = None


class StoreFilters(BaseModel):
    """Chips de filtro de la pantalla."""

    model_config = ConfigDict(frozen=True)

    near_me: bool = True
    offers_available: bool = False
    cashback: bool = False


class PaymentCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str


PAYMENT_CATEGORIES: List[PaymentCategory] = [
    PaymentCategory(id=CATEGORY_ALL, name="All", icon="grid-outline"),
    PaymentCategory(id="food", name="Food & Dining", icon="restaurant-outline"),
    PaymentCategory(id="grocery", name="Grocery", icon="cart-outline"),
    PaymentCategory(id="fashion", name="Fashion", icon="shirt-outline"),
    PaymentCategory(id="electronics", name="Electronics", icon="phone-portrait-outline"),
    PaymentCategory(id="beauty", name="Beauty & Wellness", icon="sparkles-outline"),
    PaymentCategory(id="health", name="Health & Pharmacy", icon="medkit-outline"),
    PaymentCategory(id="services", name="Services", icon="construct-outline"),
]
