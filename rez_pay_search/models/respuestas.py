"""
Envelopes de respuesta del backend.

El backend responde `{success, data: {...}, message}`; estos modelos
validan la forma del envelope y dejan los registros de tienda crudos
para que `StoreSummary.from_backend` los normalice.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .tienda import StoreSummary

logger = logging.getLogger(__name__)


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Pagination(_Envelope):
    page: int = 1
    limit: int = 20
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False


class StoreListData(_Envelope):
    stores: List[Dict[str, Any]] = Field(default_factory=list)
    category: Optional[str] = None
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator("stores", mode="before")
    @classmethod
    def none_a_lista(cls, value):
        return value or []


class StoreListResponse(_Envelope):
    """Respuesta de listados de tiendas (nearby, featured, búsqueda)."""

    success: bool = False
    data: StoreListData = Field(default_factory=StoreListData)
    message: Optional[str] = None

    @field_validator("data", mode="before")
    @classmethod
    def none_a_vacio(cls, value):
        return value or {}

    @property
    def has_stores(self) -> bool:
        return self.success and bool(self.data.stores)

    @property
    def has_next(self) -> bool:
        return self.data.pagination.has_next

    def to_summaries(self) -> List[StoreSummary]:
        """
        Normaliza los registros; los inválidos se descartan con warning
        para que un registro roto no vacíe la página entera.
        """
        summaries = []
        for raw in self.data.stores:
            try:
                summaries.append(StoreSummary.from_backend(raw, raw.get("distance")))
            except ValidationError as exc:
                logger.warning(
                    f"⚠️ Tienda descartada por datos inválidos: id={raw.get('_id')} "
                    f"errores={exc.error_count()}"
                )
            except (ValueError, TypeError) as exc:
                logger.warning(f"⚠️ Tienda descartada: id={raw.get('_id')} error={exc}")
        return summaries


class StoreCategoryInfo(_Envelope):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    color: str = ""
    count: int = 0


class StoreCategoriesData(_Envelope):
    categories: List[StoreCategoryInfo] = Field(default_factory=list)


class StoreCategoriesResponse(_Envelope):
    success: bool = False
    data: StoreCategoriesData = Field(default_factory=StoreCategoriesData)
    message: Optional[str] = None


class PaymentTransaction(_Envelope):
    store_id: str
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    amount: Optional[float] = None
    status: Optional[str] = None

    @property
    def paid_at(self) -> Optional[str]:
        return self.completed_at or self.created_at


class PaymentHistory(_Envelope):
    transactions: List[PaymentTransaction] = Field(default_factory=list)

    def unique_store_ids(self, cap: int) -> List[str]:
        """IDs de tienda únicos en orden de aparición, limitados a `cap`."""
        vistos: List[str] = []
        for tx in self.transactions:
            if tx.store_id not in vistos:
                vistos.append(tx.store_id)
        return vistos[:cap]

    def latest_for(self, store_id: str) -> Optional[PaymentTransaction]:
        return next((tx for tx in self.transactions if tx.store_id == store_id), None)
