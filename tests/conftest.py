"""
Shared pytest fixtures for rez-pay-search tests.

This module provides fixtures for:
- Settings with short debounce and a fake base URL
- A fake backend built on httpx.MockTransport
- Test data factories (raw backend store records and envelopes)
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Union
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

from rez_pay_search.config import ConfiguracionBusqueda
from rez_pay_search.core.metrics import PerformanceMetrics
from rez_pay_search.infrastructure.http import StorePaymentClient, StoreSearchClient
from rez_pay_search.models import SesionUsuario, StoreSummary
from rez_pay_search.state import SearchStateStore

BASE_URL = "http://api.test/api"


# ============================================================
# TEST DATA FACTORIES
# ============================================================


class TiendaFactory:
    """Factory for raw store records as returned by the backend."""

    _secuencia = 0

    @classmethod
    def object_id(cls) -> str:
        cls._secuencia += 1
        return f"{cls._secuencia:024x}"

    @classmethod
    def crear(cls, name: str = "Dosa Corner", **overrides) -> Dict[str, Any]:
        """Creates a local (non-brand, non-service) store with defaults."""
        store: Dict[str, Any] = {
            "_id": cls.object_id(),
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "category": {"_id": "cat-food", "name": "Food", "slug": "food"},
            "location": {"address": "MG Road", "city": "Bengaluru"},
            "ratings": {"average": 4.2, "count": 31},
            "isActive": True,
        }
        store.update(overrides)
        return store

    @classmethod
    def resumen(cls, name: str = "Dosa Corner", **overrides) -> StoreSummary:
        return StoreSummary.from_backend(cls.crear(name, **overrides))

    @staticmethod
    def respuesta(
        stores: List[Dict[str, Any]],
        has_next: bool = False,
        success: bool = True,
    ) -> Dict[str, Any]:
        """Envelope `{success, data: {stores, pagination}}` for store lists."""
        return {
            "success": success,
            "data": {
                "stores": stores,
                "pagination": {"page": 1, "limit": 20, "total": len(stores), "hasNext": has_next},
            },
        }

    @staticmethod
    def historial(store_ids: List[str]) -> Dict[str, Any]:
        """Payment history with one completed payment per store id."""
        return {
            "success": True,
            "data": {
                "transactions": [
                    {
                        "storeId": store_id,
                        "completedAt": f"2024-05-0{i + 1}T10:00:00Z",
                        "amount": 100 + i,
                    }
                    for i, store_id in enumerate(store_ids)
                ]
            },
        }


# ============================================================
# FAKE BACKEND
# ============================================================

Respuesta = Union[Dict[str, Any], httpx.Response, Callable[[httpx.Request], Any]]


class BackendFalso:
    """
    Routes requests by path (without the /api prefix) to canned responses.

    A route can be a dict (JSON 200), an httpx.Response, or a callable
    (sync or async) receiving the request.
    """

    def __init__(self):
        self.rutas: Dict[str, Respuesta] = {}
        self.requests: List[httpx.Request] = []

    def on(self, path: str, respuesta: Respuesta) -> None:
        self.rutas[path] = respuesta

    def llamadas(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if self._path(r) == path]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = unquote(request.url.path)
        return path[len("/api"):] if path.startswith("/api") else path

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ruta = self.rutas.get(self._path(request))
        if ruta is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        if callable(ruta):
            ruta = ruta(request)
            if inspect.isawaitable(ruta):
                ruta = await ruta
        if isinstance(ruta, httpx.Response):
            return ruta
        return httpx.Response(200, json=ruta)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# ============================================================
# FIXTURES
# ============================================================


@pytest.fixture
def settings() -> ConfiguracionBusqueda:
    return ConfiguracionBusqueda(
        api_base_url=BASE_URL,
        debounce_delay_seconds=0.02,
        http_timeout_seconds=2,
    )


@pytest.fixture
def metrics() -> PerformanceMetrics:
    return PerformanceMetrics()


@pytest.fixture
def backend() -> BackendFalso:
    return BackendFalso()


@pytest_asyncio.fixture
async def http_client(backend):
    client = httpx.AsyncClient(transport=backend.transport)
    yield client
    await client.aclose()


@pytest.fixture
def sesion() -> SesionUsuario:
    return SesionUsuario(is_authenticated=True, token="token-123")


@pytest.fixture
def search_client(settings, http_client, metrics, sesion) -> StoreSearchClient:
    return StoreSearchClient(settings, http_client, lambda: sesion.token, metrics)


@pytest.fixture
def payment_client(settings, http_client, metrics, sesion) -> StorePaymentClient:
    return StorePaymentClient(settings, http_client, lambda: sesion.token, metrics)


@pytest.fixture
def state_store() -> SearchStateStore:
    return SearchStateStore()


@pytest.fixture
def tienda_factory():
    return TiendaFactory


@pytest.fixture
def esperar_hasta():
    """Polls a condition until it holds or fails the test after `timeout`."""

    async def _esperar(condicion: Callable[[], bool], timeout: float = 1.0) -> None:
        limite = asyncio.get_running_loop().time() + timeout
        while not condicion():
            if asyncio.get_running_loop().time() > limite:
                pytest.fail("condition not reached in time")
            await asyncio.sleep(0.005)

    return _esperar
