"""
Coordinador de búsqueda de tiendas para pagar en tienda.

Orquesta el debounce del texto, el ejecutor de búsquedas, las secciones
auxiliares, los filtros y la ubicación. Toda la información visible vive
en el `SearchStateStore`; la capa de presentación se suscribe con
`subscribe()` o lee el snapshot `state`.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx

from ..config import ConfiguracionBusqueda, configuracion
from ..core.debounce import Debouncer
from ..core.exceptions import InvalidLocationError
from ..core.metrics import PerformanceMetrics
from ..infrastructure.http.cliente_pagos import StorePaymentClient
from ..infrastructure.http.cliente_tiendas import StoreSearchClient
from ..infrastructure.location import LocationProvider
from ..models.busqueda import (
    PAYMENT_CATEGORIES,
    PaymentCategory,
    SesionUsuario,
    StoreTab,
    UserLocation,
)
from ..models.respuestas import StoreCategoryInfo
from ..models.tienda import StoreSummary
from ..state.estado_busqueda import (
    CategorySelected,
    ErrorDismissed,
    FilterChanged,
    LocationFailed,
    LocationRequested,
    LocationUpdated,
    QueryChanged,
    QueryDebounced,
    SearchReset,
    SearchState,
    TabChanged,
)
from ..state.store import Listener, SearchStateStore
from .ejecutor_busqueda import SearchExecutor
from .filtros import filtrar_tiendas
from .secciones import SectionFetchers

logger = logging.getLogger(__name__)

MENSAJE_UBICACION_INVALIDA = "Unable to get a valid location"


def _sesion_anonima() -> SesionUsuario:
    return SesionUsuario()


class PaymentStoreSearchCoordinator:
    """
    Punto de entrada de la pantalla de búsqueda de tiendas.

    Args:
        search_client: Cliente de /stores
        payment_client: Cliente de /store-payment
        location_provider: Proveedor de ubicación del dispositivo
        obtener_sesion: Retorna la sesión actual (se consulta en cada uso)
        settings: Configuración; por defecto la global
        state_store: Store de estado; uno nuevo si no se inyecta
    """

    def __init__(
        self,
        search_client: StoreSearchClient,
        payment_client: StorePaymentClient,
        location_provider: LocationProvider,
        obtener_sesion: Optional[Callable[[], SesionUsuario]] = None,
        settings: Optional[ConfiguracionBusqueda] = None,
        state_store: Optional[SearchStateStore] = None,
    ):
        self.settings = settings or configuracion
        self._search_client = search_client
        self._payment_client = payment_client
        self._location_provider = location_provider
        self._obtener_sesion = obtener_sesion or _sesion_anonima
        self._store = state_store or SearchStateStore()

        self._executor = SearchExecutor(search_client, self._store, self.settings)
        self._secciones = SectionFetchers(
            search_client,
            payment_client,
            self._store,
            self._obtener_sesion,
            self.settings,
        )
        self._debouncer: Debouncer[str] = Debouncer(
            self.settings.debounce_delay_seconds,
            callback=self._on_query_debounced,
            initial="",
        )
        self._nearby_cargado = False
        self._cerrado = False

    @classmethod
    def crear(
        cls,
        location_provider: LocationProvider,
        obtener_sesion: Optional[Callable[[], SesionUsuario]] = None,
        settings: Optional[ConfiguracionBusqueda] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[PerformanceMetrics] = None,
    ) -> "PaymentStoreSearchCoordinator":
        """Construye el coordinador con sus clientes HTTP."""
        settings = settings or configuracion
        obtener_sesion = obtener_sesion or _sesion_anonima

        def token_actual() -> Optional[str]:
            sesion = obtener_sesion()
            return sesion.token if sesion and sesion.is_authenticated else None

        search_client = StoreSearchClient(settings, http_client, token_actual, metrics)
        payment_client = StorePaymentClient(settings, http_client, token_actual, metrics)
        return cls(
            search_client,
            payment_client,
            location_provider,
            obtener_sesion=obtener_sesion,
            settings=settings,
        )

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------

    @property
    def state(self) -> SearchState:
        return self._store.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Carga inicial: adopta la ubicación disponible, carga las secciones
        y ejecuta la búsqueda de la categoría por defecto.
        """
        try:
            coords = await self._location_provider.get_current_location()
        except Exception as exc:
            logger.warning(f"⚠️ Ubicación inicial no disponible: {exc}")
            coords = None

        ubicacion = self._a_ubicacion(coords)
        if ubicacion is not None:
            self._store.dispatch(LocationUpdated(ubicacion))
            self._nearby_cargado = True

        logger.info(
            f"🚀 Iniciando búsqueda de tiendas (ubicación={'sí' if ubicacion else 'no'})"
        )
        await asyncio.gather(self._secciones.refresh(), self._buscar(page=1))

    async def close(self) -> None:
        """
        Cancela el debounce y la búsqueda en vuelo y cierra los clientes.

        La búsqueda cancelada deja `is_searching`/`is_loading_more` en False.
        """
        if self._cerrado:
            return
        self._cerrado = True
        self._debouncer.cancel()
        self._executor.cancel_current()
        await self._search_client.aclose()
        await self._payment_client.aclose()
        logger.info("✅ Coordinador de búsqueda cerrado")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ------------------------------------------------------------------
    # Búsqueda
    # ------------------------------------------------------------------

    def set_search_query(self, text: str) -> None:
        """Actualiza el texto; la búsqueda se dispara tras el debounce."""
        self._store.dispatch(QueryChanged(text))
        self._debouncer.push(text)

    async def flush_search_query(self) -> None:
        """Ejecuta de inmediato la búsqueda pendiente del debounce."""
        await self._debouncer.flush()

    async def _on_query_debounced(self, text: str) -> None:
        self._store.dispatch(QueryDebounced(text))
        await self._buscar(page=1)

    async def set_selected_category(self, category: Optional[str]) -> None:
        self._store.dispatch(CategorySelected(category))
        await self._buscar(page=1)

    async def load_more(self) -> None:
        """
        Carga la página siguiente de la búsqueda visible.

        No hace nada si no hay más páginas, si ya hay una carga en curso o
        si hay un texto esperando el debounce: la página siguiente sería de
        una búsqueda que está por ser reemplazada.
        """
        state = self._store.state
        if state.is_searching or state.is_loading_more or not state.has_more:
            return
        if self._debouncer.is_pending:
            logger.debug("load_more ignorado: hay una búsqueda pendiente de debounce")
            return
        await self._buscar(page=state.current_page + 1)

    async def retry(self) -> None:
        """Limpia el error y repite la última búsqueda, o recarga las secciones."""
        self._store.dispatch(ErrorDismissed())
        state = self._store.state
        if state.debounced_query.strip() or state.selected_category:
            await self._buscar(page=1)
        else:
            await self.refresh()

    async def clear_search(self) -> None:
        """Vuelve a texto vacío y categoría `all`, y repite la búsqueda."""
        self._debouncer.cancel()
        self._store.dispatch(SearchReset())
        await self._buscar(page=1)

    async def _buscar(self, page: int) -> None:
        if self._cerrado:
            return
        state = self._store.state
        await self._executor.execute(state.debounced_query, state.selected_category, page)

    # ------------------------------------------------------------------
    # Secciones
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        await self._secciones.refresh()
        if self._store.state.user_location is not None:
            self._nearby_cargado = True

    # ------------------------------------------------------------------
    # Ubicación
    # ------------------------------------------------------------------

    def _a_ubicacion(self, coords: Optional[Any]) -> Optional[UserLocation]:
        if not coords:
            return None
        try:
            return UserLocation.from_coordinates(coords.get("latitude"), coords.get("longitude"))
        except InvalidLocationError as exc:
            logger.warning(f"⚠️ {exc}")
            return None

    async def request_location(self) -> Optional[UserLocation]:
        """
        Pide una ubicación nueva al proveedor.

        La primera ubicación válida dispara la carga de cercanas; cualquier
        ubicación nueva repite la búsqueda actual para ordenar por distancia.

        Returns:
            La ubicación obtenida, o None si falló (ver `state.location_error`)
        """
        self._store.dispatch(LocationRequested())
        try:
            coords = await self._location_provider.refresh_location()
        except Exception as exc:
            logger.error(f"❌ Error obteniendo ubicación: {exc}")
            self._store.dispatch(LocationFailed(str(exc) or MENSAJE_UBICACION_INVALIDA))
            return None

        ubicacion = self._a_ubicacion(coords)
        if ubicacion is None:
            self._store.dispatch(LocationFailed(MENSAJE_UBICACION_INVALIDA))
            return None

        self._store.dispatch(LocationUpdated(ubicacion))
        logger.info(f"📍 Ubicación actualizada: {ubicacion.to_api_param()}")

        tareas = [self._buscar(page=1)]
        if not self._nearby_cargado:
            self._nearby_cargado = True
            tareas.append(self._secciones.fetch_nearby())
        await asyncio.gather(*tareas)
        return ubicacion

    # ------------------------------------------------------------------
    # Filtros y pestañas
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: bool) -> None:
        """
        Activa o desactiva un chip de filtro.

        Raises:
            ValueError: si el filtro no existe
        """
        self._store.dispatch(FilterChanged(name, bool(value)))

    def set_active_tab(self, tab: StoreTab) -> None:
        self._store.dispatch(TabChanged(StoreTab(tab)))

    def filtered_stores(self, stores: Optional[List[StoreSummary]] = None) -> List[StoreSummary]:
        """Aplica filtros y pestaña activos; por defecto sobre los resultados de búsqueda."""
        state = self._store.state
        if stores is None:
            stores = list(state.search_results)
        return filtrar_tiendas(stores, state.filters, state.active_tab, state.user_location)

    # ------------------------------------------------------------------
    # Catálogo
    # ------------------------------------------------------------------

    @staticmethod
    def categories() -> List[PaymentCategory]:
        """Categorías navegables de la pantalla; la primera es `all`."""
        return list(PAYMENT_CATEGORIES)

    async def fetch_store_categories(self) -> List[StoreCategoryInfo]:
        response = await self._search_client.get_store_categories()
        return response.data.categories

    async def get_store(self, store_id: str) -> StoreSummary:
        raw = await self._search_client.get_store_by_id(store_id)
        return StoreSummary.from_backend(raw)
