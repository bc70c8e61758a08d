"""
Secciones auxiliares de la pantalla: cercanas, recientes y populares.

Cada sección se carga de forma independiente y escribe solo su propio
slot del estado; el fallo de una nunca bloquea a las demás.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from ..config import ConfiguracionBusqueda, configuracion
from ..core.exceptions import StoreApiError
from ..infrastructure.http.cliente_pagos import StorePaymentClient
from ..infrastructure.http.cliente_tiendas import StoreSearchClient
from ..models.busqueda import CATEGORY_ALL, SesionUsuario, SortBy
from ..models.respuestas import PaymentTransaction
from ..models.tienda import StoreSummary
from ..state.estado_busqueda import (
    InitialLoadingChanged,
    Section,
    SectionLoaded,
    SectionLoading,
)
from ..state.store import SearchStateStore

logger = logging.getLogger(__name__)


class SectionFetchers:
    """Carga las tres secciones y publica sus resultados en el store."""

    def __init__(
        self,
        search_client: StoreSearchClient,
        payment_client: StorePaymentClient,
        state_store: SearchStateStore,
        obtener_sesion: Callable[[], SesionUsuario],
        settings: Optional[ConfiguracionBusqueda] = None,
    ):
        self._search_client = search_client
        self._payment_client = payment_client
        self._store = state_store
        self._obtener_sesion = obtener_sesion
        self.settings = settings or configuracion

    @property
    def autenticado(self) -> bool:
        sesion = self._obtener_sesion()
        return sesion is not None and sesion.is_authenticated

    async def fetch_nearby(self) -> bool:
        """
        Carga tiendas cercanas a la ubicación actual.

        Returns:
            False si no hay ubicación y la sección se omitió
        """
        location = self._store.state.user_location
        if location is None:
            logger.debug("Sin ubicación: se omite sección de cercanas")
            return False

        self._store.dispatch(SectionLoading(Section.NEARBY, True))
        try:
            response = await self._search_client.get_nearby_stores(
                location.to_api_param(),
                radius=self.settings.default_radius_km,
                limit=self.settings.nearby_limit,
            )
            stores = tuple(response.to_summaries()) if response.has_stores else ()
            self._store.dispatch(SectionLoaded(Section.NEARBY, stores))
            logger.info(f"✅ Tiendas cercanas cargadas: {len(stores)}")
        except Exception as exc:
            logger.error(f"❌ Error cargando tiendas cercanas: {exc}")
        finally:
            self._store.dispatch(SectionLoading(Section.NEARBY, False))
        return True

    async def fetch_recent(self) -> bool:
        """
        Carga tiendas donde el usuario pagó recientemente.

        El historial se deduplica por tienda y cada tienda se hidrata en
        paralelo; las que fallan se descartan sin afectar a las demás.

        Returns:
            False si no hay sesión y la sección se omitió
        """
        if not self.autenticado:
            logger.debug("Sin sesión: se omite sección de recientes")
            return False

        self._store.dispatch(SectionLoading(Section.RECENT, True))
        try:
            try:
                history = await self._payment_client.get_history(limit=self.settings.recent_limit)
            except StoreApiError as exc:
                # Usuarios nuevos no tienen historial
                logger.debug(f"Historial de pagos no disponible: {exc}")
                self._store.dispatch(SectionLoaded(Section.RECENT, ()))
                return True

            store_ids = history.unique_store_ids(self.settings.recent_hydration_cap)
            resultados = await asyncio.gather(
                *(self._hidratar(store_id, history.latest_for(store_id)) for store_id in store_ids),
                return_exceptions=True,
            )

            stores = []
            for store_id, resultado in zip(store_ids, resultados):
                if isinstance(resultado, Exception):
                    logger.warning(f"⚠️ No se pudo hidratar tienda reciente {store_id}: {resultado}")
                    continue
                stores.append(resultado)

            self._store.dispatch(SectionLoaded(Section.RECENT, tuple(stores)))
            logger.info(f"✅ Tiendas recientes cargadas: {len(stores)}/{len(store_ids)}")
        except Exception as exc:
            logger.error(f"❌ Error cargando tiendas recientes: {exc}")
        finally:
            self._store.dispatch(SectionLoading(Section.RECENT, False))
        return True

    async def _hidratar(
        self, store_id: str, tx: Optional[PaymentTransaction]
    ) -> StoreSummary:
        raw: Dict[str, Any] = await self._payment_client.get_store_payment_info(store_id)
        return StoreSummary.from_backend({**raw, "lastPaidAt": tx.paid_at if tx else None})

    async def fetch_popular(self) -> None:
        """Carga tiendas destacadas; si no hay, cae a todas por rating."""
        self._store.dispatch(SectionLoading(Section.POPULAR, True))
        try:
            try:
                response = await self._search_client.get_featured_stores(
                    limit=self.settings.popular_limit
                )
                if response.has_stores:
                    stores = tuple(response.to_summaries())
                    self._store.dispatch(SectionLoaded(Section.POPULAR, stores))
                    logger.info(f"✅ Tiendas populares cargadas: {len(stores)}")
                    return
                logger.info("📭 Sin tiendas destacadas, usando listado por rating")
            except StoreApiError as exc:
                logger.warning(f"⚠️ Destacadas no disponibles, usando listado por rating: {exc}")

            try:
                fallback = await self._search_client.search_stores_by_category(
                    CATEGORY_ALL,
                    sort_by=SortBy.RATING,
                    limit=self.settings.popular_limit,
                )
            except Exception as exc:
                logger.error(f"❌ Error cargando tiendas populares: {exc}")
                return

            stores = tuple(fallback.to_summaries()) if fallback.has_stores else ()
            self._store.dispatch(SectionLoaded(Section.POPULAR, stores))
            logger.info(f"✅ Tiendas populares (por rating) cargadas: {len(stores)}")
        finally:
            self._store.dispatch(SectionLoading(Section.POPULAR, False))

    async def refresh(self) -> None:
        """
        Recarga las secciones en paralelo: populares siempre, recientes con
        sesión, cercanas con ubicación. `is_initial_loading` queda en True
        hasta que terminan todas.
        """
        self._store.dispatch(InitialLoadingChanged(True))
        try:
            tareas = [self.fetch_popular()]
            if self.autenticado:
                tareas.append(self.fetch_recent())
            if self._store.state.user_location is not None:
                tareas.append(self.fetch_nearby())

            resultados = await asyncio.gather(*tareas, return_exceptions=True)
            for resultado in resultados:
                if isinstance(resultado, Exception):
                    logger.error(f"❌ Error inesperado recargando secciones: {resultado}")
        finally:
            self._store.dispatch(InitialLoadingChanged(False))
