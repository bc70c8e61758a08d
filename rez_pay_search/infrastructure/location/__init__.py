from .proveedor_ubicacion import DeviceCoordinates, LocationProvider, StaticLocationProvider

__all__ = ["DeviceCoordinates", "LocationProvider", "StaticLocationProvider"]
