"""Clientes HTTP del backend REZ."""

from .cliente_base import BackendHttpClient
from .cliente_pagos import StorePaymentClient
from .cliente_tiendas import StoreSearchClient

__all__ = ["BackendHttpClient", "StorePaymentClient", "StoreSearchClient"]
