"""
Módulo de logging estructurado.

Proporciona logging en formato JSON con correlation IDs por búsqueda
para seguir cada consulta a través del pipeline.
"""

from .structured_logger import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_correlation_id,
    get_search_context,
    search_log_context,
)

__all__ = [
    "configure_logging",
    "get_correlation_id",
    "get_search_context",
    "search_log_context",
    "StructuredFormatter",
    "HumanReadableFormatter",
]
