"""
Ejecutor de búsquedas de tiendas.

Decide qué consulta emitir (listar todas vs. buscar por término), agrega
ubicación/radio/orden y garantiza que solo haya una búsqueda en vuelo:
cada búsqueda nueva cancela el token y la tarea de la anterior, y los
resultados de una búsqueda cancelada nunca se aplican al estado.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import ConfiguracionBusqueda, configuracion
from ..core.cancelacion import CancellationToken
from ..core.exceptions import SearchCancelledError, StoreApiError
from ..infrastructure.http.cliente_tiendas import StoreSearchClient, is_object_id
from ..infrastructure.logging import search_log_context
from ..models.busqueda import CATEGORY_ALL, SearchError, SearchErrorCode, SortBy, UserLocation
from ..models.respuestas import StoreListResponse
from ..state.estado_busqueda import (
    ResultsCleared,
    SearchAborted,
    SearchEmpty,
    SearchFailed,
    SearchStarted,
    SearchSucceeded,
)
from ..state.store import SearchStateStore

logger = logging.getLogger(__name__)


class SearchKind(str, Enum):
    BROWSE_ALL = "browse_all"
    TERM = "term"
    CATEGORY_ID = "category_id"


@dataclass(frozen=True)
class SearchPlan:
    """Consulta concreta a emitir para (texto, categoría, página)."""

    kind: SearchKind
    page: int
    limit: int
    sort_by: SortBy
    search_term: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    radius: Optional[int] = None


def construir_plan(
    query: str,
    category: Optional[str],
    page: int,
    location: Optional[UserLocation],
    settings: ConfiguracionBusqueda,
) -> Optional[SearchPlan]:
    """
    Traduce la entrada del usuario a una consulta al backend.

    Returns:
        SearchPlan, o None cuando no hay texto ni categoría (no se busca)

    Example:
        >>> construir_plan("", "all", 1, None, settings).sort_by
        <SortBy.RATING: 'rating'>
        >>> construir_plan("", "cafes", 1, None, settings).search_term
        'cafes'
        >>> construir_plan("", "64f1c0a2b3d4e5f6a7b8c9d0", 1, None, settings).kind
        <SearchKind.CATEGORY_ID: 'category_id'>
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")

    texto = (query or "").strip()
    if not texto and not category:
        return None

    sort_by = SortBy.DISTANCE if location else SortBy.RATING
    ubicacion = location.to_api_param() if location else None
    radio = settings.default_radius_km if location else None

    if not texto and category == CATEGORY_ALL:
        return SearchPlan(
            kind=SearchKind.BROWSE_ALL,
            page=page,
            limit=settings.default_page_size,
            sort_by=sort_by,
            category=CATEGORY_ALL,
            location=ubicacion,
            radius=radio,
        )

    if not texto and is_object_id(category):
        return SearchPlan(
            kind=SearchKind.CATEGORY_ID,
            page=page,
            limit=settings.default_page_size,
            sort_by=sort_by,
            category=category,
            location=ubicacion,
            radius=radio,
        )

    return SearchPlan(
        kind=SearchKind.TERM,
        page=page,
        limit=settings.default_page_size,
        sort_by=sort_by,
        search_term=texto or category,
        category=category,
        location=ubicacion,
        radius=radio,
    )


class SearchExecutor:
    """Ejecuta búsquedas con cancelación de la búsqueda anterior."""

    def __init__(
        self,
        client: StoreSearchClient,
        state_store: SearchStateStore,
        settings: Optional[ConfiguracionBusqueda] = None,
    ):
        self._client = client
        self._store = state_store
        self.settings = settings or configuracion
        self._secuencia = itertools.count(1)
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None
        self._search_id: Optional[int] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel_current(self) -> None:
        """Cancela la búsqueda en vuelo, si existe, y apaga sus flags de carga."""
        search_id = self._search_id if self.in_flight else None
        self._abortar()
        if search_id is not None:
            self._store.dispatch(SearchAborted(search_id))

    def _abortar(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._token = None
        self._task = None
        self._search_id = None

    async def execute(self, query: str, category: Optional[str], page: int = 1) -> None:
        """
        Ejecuta una búsqueda y aplica el resultado al estado.

        Retorna cuando la búsqueda termina o es reemplazada por otra.
        """
        self._abortar()
        search_id = next(self._secuencia)

        plan = construir_plan(query, category, page, self._store.state.user_location, self.settings)
        if plan is None:
            logger.debug("Búsqueda vacía: sin texto ni categoría, se limpian resultados")
            self._store.dispatch(ResultsCleared(search_id))
            return

        token = CancellationToken(label=f"search#{search_id}")
        self._store.dispatch(SearchStarted(search_id, page))
        task = asyncio.create_task(self._ejecutar(plan, search_id, token))
        self._token = token
        self._task = task
        self._search_id = search_id

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            token.cancel()
            task.cancel()
            self._store.dispatch(SearchAborted(search_id))
            raise

        if task.cancelled():
            return
        task.result()

    async def _ejecutar(self, plan: SearchPlan, search_id: int, token: CancellationToken) -> None:
        with search_log_context(
            search_id=search_id,
            query=plan.search_term,
            category=plan.category,
            kind=plan.kind.value,
            page=plan.page,
        ):
            logger.info(
                f"🔍 Buscando tiendas: tipo={plan.kind.value}, término='{plan.search_term or ''}', "
                f"página={plan.page}, orden={plan.sort_by.value}"
            )
            try:
                response = await self._consultar(plan, token)
            except SearchCancelledError:
                logger.debug(f"Búsqueda #{search_id} reemplazada, se descarta")
                return
            except StoreApiError as exc:
                if token.cancelled:
                    return
                logger.error(f"❌ Error en búsqueda de tiendas: {exc}")
                self._store.dispatch(
                    SearchFailed(search_id, plan.page, _error_de_servidor(str(exc)))
                )
                return
            except Exception as exc:
                if token.cancelled:
                    return
                logger.exception(f"❌ Error inesperado en búsqueda de tiendas: {exc}")
                self._store.dispatch(
                    SearchFailed(search_id, plan.page, _error_de_servidor(str(exc)))
                )
                return

            if token.cancelled:
                return

            if response.has_stores:
                stores = tuple(response.to_summaries())
                self._store.dispatch(
                    SearchSucceeded(search_id, plan.page, stores, response.has_next)
                )
                logger.info(
                    f"✅ Búsqueda completada: {len(stores)} tiendas, has_more={response.has_next}"
                )
            else:
                self._store.dispatch(SearchEmpty(search_id, plan.page))
                logger.info("📭 Búsqueda sin resultados")

    async def _consultar(self, plan: SearchPlan, token: CancellationToken) -> StoreListResponse:
        if plan.kind in (SearchKind.BROWSE_ALL, SearchKind.CATEGORY_ID):
            return await self._client.search_stores_by_category(
                plan.category,
                page=plan.page,
                limit=plan.limit,
                sort_by=plan.sort_by,
                location=plan.location,
                radius=plan.radius,
                cancel_token=token,
            )
        return await self._client.advanced_store_search(
            search=plan.search_term,
            page=plan.page,
            limit=plan.limit,
            sort_by=plan.sort_by,
            location=plan.location,
            radius=plan.radius,
            cancel_token=token,
        )


def _error_de_servidor(message: str) -> SearchError:
    return SearchError(
        code=SearchErrorCode.SERVER_ERROR,
        message=message or "Failed to search stores",
        recoverable=True,
    )
