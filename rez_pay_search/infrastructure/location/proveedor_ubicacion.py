"""
Interfaz del proveedor de ubicación del dispositivo.

El coordinador no conoce el GPS; recibe un proveedor inyectado que entrega
coordenadas crudas. La validación (numéricas, no NaN) ocurre en el
coordinador al convertirlas a `UserLocation`.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, TypedDict


class DeviceCoordinates(TypedDict):
    latitude: Any
    longitude: Any


class LocationProvider(ABC):
    """Contrato del proveedor de ubicación."""

    @abstractmethod
    async def get_current_location(self) -> Optional[DeviceCoordinates]:
        """
        Última ubicación conocida, sin pedir permisos.

        Returns:
            Coordenadas crudas o None si todavía no hay ubicación
        """
        pass

    @abstractmethod
    async def refresh_location(self) -> Optional[DeviceCoordinates]:
        """
        Solicita una lectura nueva (puede pedir permisos al usuario).

        Raises:
            Exception: cualquier error del proveedor (permiso denegado, GPS apagado)
        """
        pass


class StaticLocationProvider(LocationProvider):
    """Proveedor con coordenadas fijas; útil en desarrollo y pruebas."""

    def __init__(self, latitude: Optional[float] = None, longitude: Optional[float] = None):
        self._coords: Optional[DeviceCoordinates] = None
        if latitude is not None and longitude is not None:
            self._coords = {"latitude": latitude, "longitude": longitude}

    def move_to(self, latitude: float, longitude: float) -> None:
        self._coords = {"latitude": latitude, "longitude": longitude}

    async def get_current_location(self) -> Optional[DeviceCoordinates]:
        return self._coords

    async def refresh_location(self) -> Optional[DeviceCoordinates]:
        return self._coords
