"""
rez-pay-search: coordinador de búsqueda de tiendas para el flujo Pay-In-Store.

Punto de entrada principal:

    from rez_pay_search import PaymentStoreSearchCoordinator

    async with PaymentStoreSearchCoordinator.crear(
        location_provider=StaticLocationProvider(ubicacion),
        obtener_sesion=lambda: SesionUsuario(is_authenticated=True, token="..."),
    ) as coordinador:
        await coordinador.start()
        coordinador.set_search_query("pizza")
"""

from .config import ConfiguracionBusqueda, configuracion
from .infrastructure.location import LocationProvider, StaticLocationProvider
from .models import SesionUsuario, StoreSummary, UserLocation
from .services.coordinador_busqueda import PaymentStoreSearchCoordinator

__all__ = [
    "ConfiguracionBusqueda",
    "configuracion",
    "LocationProvider",
    "StaticLocationProvider",
    "PaymentStoreSearchCoordinator",
    "SesionUsuario",
    "StoreSummary",
    "UserLocation",
]

__version__ = "0.1.0"
