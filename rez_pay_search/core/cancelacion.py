"""
Token de cancelación para el pipeline de búsqueda.

Cada búsqueda recibe su propio token. Cuando una búsqueda nueva reemplaza
a la anterior, el token viejo se cancela y cualquier punto del pipeline
que lo consulte (cliente HTTP, ejecutor) abandona el trabajo sin aplicar
resultados.
"""

import asyncio
from typing import Optional

from .exceptions import SearchCancelledError


class CancellationToken:
    """
    Token cooperativo de cancelación.

    Uso:
        token = CancellationToken(label="search#3")
        ...
        token.raise_if_cancelled()   # lanza SearchCancelledError
        if token.cancelled:
            return
    """

    def __init__(self, label: Optional[str] = None):
        self.label = label
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SearchCancelledError(f"Search superseded: {self.label or 'anonymous'}")

    async def wait(self) -> None:
        """Espera hasta que el token sea cancelado."""
        await self._event.wait()

    def __repr__(self) -> str:
        estado = "cancelled" if self.cancelled else "active"
        return f"CancellationToken(label={self.label!r}, {estado})"
