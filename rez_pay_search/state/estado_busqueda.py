"""
Estado de la pantalla de búsqueda y sus transiciones.

Todo cambio de estado pasa por `reducir(estado, accion)`: una función pura
que recibe una acción (variante etiquetada, dataclass inmutable) y retorna
un estado nuevo. El estado nunca se muta en sitio.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from ..models.busqueda import (
    CATEGORY_ALL,
    SearchError,
    StoreFilters,
    StoreTab,
    UserLocation,
)
from ..models.tienda import StoreSummary

Stores = Tuple[StoreSummary, ...]


class Section(str, Enum):
    """Secciones auxiliares mostradas junto a los resultados."""

    NEARBY = "nearby"
    RECENT = "recent"
    POPULAR = "popular"


@dataclass(frozen=True)
class SearchState:
    # Búsqueda
    search_query: str = ""
    debounced_query: str = ""
    selected_category: Optional[str] = CATEGORY_ALL
    search_results: Stores = ()
    is_searching: bool = False
    search_error: Optional[SearchError] = None
    active_search_id: int = 0

    # Paginación
    has_more: bool = False
    current_page: int = 1
    is_loading_more: bool = False

    # Secciones
    nearby_stores: Stores = ()
    recent_stores: Stores = ()
    popular_stores: Stores = ()
    is_loading_nearby: bool = False
    is_loading_recent: bool = False
    is_loading_popular: bool = False
    is_initial_loading: bool = True

    # Filtros y pestañas
    filters: StoreFilters = field(default_factory=StoreFilters)
    active_tab: StoreTab = StoreTab.ALL

    # Ubicación
    user_location: Optional[UserLocation] = None
    is_loading_location: bool = False
    location_error: Optional[str] = None

    def section_stores(self, section: Section) -> Stores:
        return getattr(self, f"{section.value}_stores")

    def section_loading(self, section: Section) -> bool:
        return getattr(self, f"is_loading_{section.value}")


# ============================================================
# ACCIONES
# ============================================================


@dataclass(frozen=True)
class QueryChanged:
    text: str


@dataclass(frozen=True)
class QueryDebounced:
    text: str


@dataclass(frozen=True)
class CategorySelected:
    category: Optional[str]


@dataclass(frozen=True)
class SearchStarted:
    search_id: int
    page: int


@dataclass(frozen=True)
class SearchSucceeded:
    search_id: int
    page: int
    stores: Stores
    has_more: bool


@dataclass(frozen=True)
class SearchFailed:
    search_id: int
    page: int
    error: SearchError


@dataclass(frozen=True)
class SearchEmpty:
    search_id: int
    page: int


@dataclass(frozen=True)
class SearchAborted:
    search_id: int


@dataclass(frozen=True)
class ResultsCleared:
    search_id: int


@dataclass(frozen=True)
class SearchReset:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass


@dataclass(frozen=True)
class SectionLoading:
    section: Section
    loading: bool


@dataclass(frozen=True)
class SectionLoaded:
    section: Section
    stores: Stores


@dataclass(frozen=True)
class InitialLoadingChanged:
    loading: bool


@dataclass(frozen=True)
class FilterChanged:
    name: str
    value: bool


@dataclass(frozen=True)
class TabChanged:
    tab: StoreTab


@dataclass(frozen=True)
class LocationRequested:
    pass


@dataclass(frozen=True)
class LocationUpdated:
    location: UserLocation


@dataclass(frozen=True)
class LocationFailed:
    message: str


# ============================================================
# REDUCER
# ============================================================


def _es_busqueda_actual(estado: SearchState, search_id: int) -> bool:
    return search_id == estado.active_search_id


def reducir(estado: SearchState, accion) -> SearchState:
    """
    Aplica una acción al estado y retorna el estado resultante.

    Los resultados de una búsqueda que ya no es la activa se ignoran.

    Raises:
        TypeError: si la acción no es una variante conocida
    """
    if isinstance(accion, QueryChanged):
        return replace(estado, search_query=accion.text)

    if isinstance(accion, QueryDebounced):
        return replace(estado, debounced_query=accion.text)

    if isinstance(accion, CategorySelected):
        return replace(estado, selected_category=accion.category)

    if isinstance(accion, SearchStarted):
        primera = accion.page == 1
        return replace(
            estado,
            active_search_id=accion.search_id,
            is_searching=primera,
            is_loading_more=not primera,
            search_error=None,
            # La página 1 reemplaza los resultados; no se pagina sobre los viejos
            has_more=estado.has_more and not primera,
        )

    if isinstance(accion, SearchSucceeded):
        if not _es_busqueda_actual(estado, accion.search_id):
            return estado
        if accion.page == 1:
            resultados = tuple(accion.stores)
        else:
            resultados = estado.search_results + tuple(accion.stores)
        return replace(
            estado,
            search_results=resultados,
            has_more=accion.has_more,
            current_page=accion.page,
            is_searching=False,
            is_loading_more=False,
        )

    if isinstance(accion, SearchFailed):
        if not _es_busqueda_actual(estado, accion.search_id):
            return estado
        return replace(
            estado,
            search_results=() if accion.page == 1 else estado.search_results,
            current_page=1 if accion.page == 1 else estado.current_page,
            search_error=accion.error,
            is_searching=False,
            is_loading_more=False,
        )

    if isinstance(accion, SearchEmpty):
        if not _es_busqueda_actual(estado, accion.search_id):
            return estado
        return replace(
            estado,
            search_results=() if accion.page == 1 else estado.search_results,
            current_page=1 if accion.page == 1 else estado.current_page,
            has_more=False,
            is_searching=False,
            is_loading_more=False,
        )

    if isinstance(accion, SearchAborted):
        if not _es_busqueda_actual(estado, accion.search_id):
            return estado
        return replace(estado, is_searching=False, is_loading_more=False)

    if isinstance(accion, ResultsCleared):
        return replace(
            estado,
            active_search_id=accion.search_id,
            search_results=(),
            search_error=None,
            current_page=1,
            has_more=False,
            is_searching=False,
            is_loading_more=False,
        )

    if isinstance(accion, SearchReset):
        return replace(
            estado,
            search_query="",
            debounced_query="",
            selected_category=CATEGORY_ALL,
            search_error=None,
            current_page=1,
            has_more=False,
        )

    if isinstance(accion, ErrorDismissed):
        return replace(estado, search_error=None)

    if isinstance(accion, SectionLoading):
        return replace(estado, **{f"is_loading_{accion.section.value}": accion.loading})

    if isinstance(accion, SectionLoaded):
        return replace(estado, **{f"{accion.section.value}_stores": tuple(accion.stores)})

    if isinstance(accion, InitialLoadingChanged):
        return replace(estado, is_initial_loading=accion.loading)

    if isinstance(accion, FilterChanged):
        if accion.name not in StoreFilters.model_fields:
            raise ValueError(f"Unknown filter: {accion.name}")
        filtros = estado.filters.model_copy(update={accion.name: accion.value})
        return replace(estado, filters=filtros)

    if isinstance(accion, TabChanged):
        return replace(estado, active_tab=accion.tab)

    if isinstance(accion, LocationRequested):
        return replace(estado, is_loading_location=True, location_error=None)

    if isinstance(accion, LocationUpdated):
        return replace(
            estado,
            user_location=accion.location,
            is_loading_location=False,
            location_error=None,
        )

    if isinstance(accion, LocationFailed):
        return replace(estado, is_loading_location=False, location_error=accion.message)

    raise TypeError(f"Unknown action: {type(accion).__name__}")
