"""
Cliente HTTP base para el backend REZ.

Encapsula un `httpx.AsyncClient` compartido y traduce los errores de
transporte a las excepciones del dominio. Cada llamada:
- revisa el token de cancelación antes y después de la request
- se mide con `PerformanceMetrics.timer`
- agrega `Authorization: Bearer` cuando hay sesión
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from ...config import ConfiguracionBusqueda, configuracion
from ...core.cancelacion import CancellationToken
from ...core.exceptions import (
    StoreApiError,
    StoreApiHttpError,
    StoreApiResponseError,
    StoreApiTimeoutError,
)
from ...core.metrics import PerformanceMetrics, metrics as metrics_globales

logger = logging.getLogger(__name__)


class BackendHttpClient:
    """Cliente base; las subclases definen los endpoints."""

    def __init__(
        self,
        settings: Optional[ConfiguracionBusqueda] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        auth_token_getter: Optional[Callable[[], Optional[str]]] = None,
        metrics: Optional[PerformanceMetrics] = None,
    ):
        self.settings = settings or configuracion
        self.base_url = self.settings.api_base_url.rstrip("/")
        self._http = http_client
        self._owns_http = http_client is None
        self._auth_token_getter = auth_token_getter
        self.metrics = metrics or metrics_globales

    def _cliente(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self.settings.http_timeout_seconds,
                headers={"Content-Type": "application/json"},
            )
        return self._http

    def _headers(self) -> Dict[str, str]:
        token = self._auth_token_getter() if self._auth_token_getter else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _get_json(
        self,
        path: str,
        *,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Ejecuta un GET y retorna el JSON decodificado.

        Raises:
            SearchCancelledError: si el token se canceló antes o durante la request
            StoreApiTimeoutError / StoreApiHttpError / StoreApiResponseError / StoreApiError
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        url = f"{self.base_url}{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        async with self.metrics.timer(operation, metadata={"path": path}):
            try:
                response = await self._cliente().get(url, params=query, headers=self._headers())
            except httpx.TimeoutException as exc:
                logger.error(f"⏰ Timeout en {operation}: {url}")
                raise StoreApiTimeoutError(f"Timeout calling {url}") from exc
            except httpx.RequestError as exc:
                logger.error(f"❌ Error de red en {operation}: {exc}")
                raise StoreApiError(f"Network error calling {url}: {exc}") from exc

            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            if response.is_error:
                logger.error(
                    f"❌ Error HTTP en {operation}: {response.status_code} - {response.text[:200]}"
                )
                raise StoreApiHttpError(response.status_code, url)

            try:
                payload = response.json()
            except ValueError as exc:
                raise StoreApiResponseError(f"Invalid JSON from {url}") from exc

        if not isinstance(payload, dict):
            raise StoreApiResponseError(f"Unexpected payload type from {url}: {type(payload).__name__}")
        return payload

    async def aclose(self) -> None:
        """Cierra el cliente HTTP si fue creado por esta instancia."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
