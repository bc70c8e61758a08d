"""Estado observable de la búsqueda (reducer + store)."""

from .estado_busqueda import SearchState, Section, reducir
from .store import SearchStateStore

__all__ = ["SearchState", "SearchStateStore", "Section", "reducir"]
