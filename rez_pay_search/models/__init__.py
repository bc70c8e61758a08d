"""Modelos de dominio y DTOs del backend."""

from .busqueda import (
    CATEGORY_ALL,
    PAYMENT_CATEGORIES,
    PaymentCategory,
    SearchError,
    SearchErrorCode,
    SesionUsuario,
    SortBy,
    StoreFilters,
    StoreTab,
    UserLocation,
)
from .respuestas import (
    Pagination,
    PaymentHistory,
    PaymentTransaction,
    StoreCategoriesResponse,
    StoreListResponse,
)
from .tienda import StoreSummary, detect_is_brand, detect_is_local, detect_is_service, is_store_open_now

__all__ = [
    "CATEGORY_ALL",
    "PAYMENT_CATEGORIES",
    "PaymentCategory",
    "SearchError",
    "SearchErrorCode",
    "SesionUsuario",
    "SortBy",
    "StoreFilters",
    "StoreTab",
    "UserLocation",
    "Pagination",
    "PaymentHistory",
    "PaymentTransaction",
    "StoreCategoriesResponse",
    "StoreListResponse",
    "StoreSummary",
    "detect_is_brand",
    "detect_is_local",
    "detect_is_service",
    "is_store_open_now",
]
