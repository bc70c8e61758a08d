"""Filtros de chips y pestañas aplicados sobre una lista de tiendas."""

import logging
from typing import Iterable, List, Optional

from ..models.busqueda import StoreFilters, StoreTab, UserLocation
from ..models.tienda import StoreSummary

logger = logging.getLogger(__name__)

# Distancia usada para ordenar tiendas sin distancia conocida
DISTANCIA_DESCONOCIDA = 999


def _tiene_posicion(store: StoreSummary) -> bool:
    return store.distance is not None or bool(store.location.coordinates)


def _distancia(store: StoreSummary) -> float:
    return store.distance if store.distance is not None else DISTANCIA_DESCONOCIDA


def filtrar_por_pestana(stores: Iterable[StoreSummary], tab: StoreTab) -> List[StoreSummary]:
    tab = StoreTab(tab)
    if tab is StoreTab.BRANDS:
        return [s for s in stores if s.is_brand]
    if tab is StoreTab.LOCAL:
        return [s for s in stores if s.is_local]
    if tab is StoreTab.SERVICES:
        return [s for s in stores if s.is_service]
    return list(stores)


def filtrar_tiendas(
    stores: Iterable[StoreSummary],
    filters: StoreFilters,
    tab: StoreTab = StoreTab.ALL,
    user_location: Optional[UserLocation] = None,
) -> List[StoreSummary]:
    """
    Aplica filtros activos y luego la pestaña seleccionada.

    - near_me (solo con ubicación): conserva tiendas con distancia o
      coordenadas y ordena por distancia ascendente
    - offers_available: descuento, cashback o maxCashback > 0
    - cashback: cashback o maxCashback > 0

    Returns:
        Lista nueva; la entrada no se modifica
    """
    resultado = list(stores)
    total = len(resultado)

    if filters.near_me and user_location is not None:
        resultado = sorted(
            (s for s in resultado if _tiene_posicion(s)),
            key=_distancia,
        )

    if filters.offers_available:
        resultado = [s for s in resultado if s.has_any_offer]

    if filters.cashback:
        resultado = [s for s in resultado if s.has_cashback]

    resultado = filtrar_por_pestana(resultado, tab)

    logger.debug(
        f"Filtros aplicados: {total} → {len(resultado)} tiendas "
        f"(near_me={filters.near_me}, offers={filters.offers_available}, "
        f"cashback={filters.cashback}, tab={StoreTab(tab).value})"
    )
    return resultado
