"""Cliente HTTP para el servicio de pagos en tienda (/store-payment)."""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from ...core.exceptions import StoreApiResponseError
from ...models.respuestas import PaymentHistory
from .cliente_base import BackendHttpClient

logger = logging.getLogger(__name__)


def _unwrap(payload: Dict[str, Any]) -> Dict[str, Any]:
    # El API client del backend puede envolver la respuesta en {success, data}
    data = payload.get("data")
    return data if isinstance(data, dict) else payload


class StorePaymentClient(BackendHttpClient):
    """Historial de pagos e información de pago de tiendas. Requiere sesión."""

    async def get_history(self, limit: int = 10) -> PaymentHistory:
        payload = await self._get_json(
            "/store-payment/history",
            operation="store_payment.history",
            params={"limit": limit},
        )
        try:
            return PaymentHistory.model_validate(_unwrap(payload))
        except ValidationError as exc:
            raise StoreApiResponseError("Invalid payment history response") from exc

    async def get_store_payment_info(self, store_id: str) -> Dict[str, Any]:
        """Registro completo de la tienda usado para hidratar pagos recientes."""
        payload = await self._get_json(
            f"/store-payment/store-info/{store_id}",
            operation="store_payment.store_info",
        )
        store = _unwrap(payload)
        if not store.get("_id") and not store.get("id"):
            raise StoreApiResponseError(f"Store payment info for {store_id} without id")
        return store
