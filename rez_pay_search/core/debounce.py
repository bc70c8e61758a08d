"""
Debounce de valores para evitar una llamada de red por cada tecla.

Cada `push()` reemplaza el timer pendiente; solo el último valor se
publica cuando el usuario deja de escribir durante `delay` segundos.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Debouncer(Generic[T]):
    """
    Publica el valor final tras una pausa de `delay` segundos.

    Args:
        delay: Segundos de inactividad antes de publicar
        callback: Corrutina opcional que recibe el valor publicado
        initial: Valor inicial publicado
    """

    def __init__(
        self,
        delay: float,
        callback: Optional[Callable[[T], Awaitable[Any]]] = None,
        initial: Optional[T] = None,
    ):
        self.delay = delay
        self._callback = callback
        self._value: Optional[T] = initial
        self._pending: Optional[T] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def value(self) -> Optional[T]:
        """Último valor publicado (trailing)."""
        return self._value

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, value: T) -> None:
        """Registra un valor nuevo, reemplazando el timer pendiente."""
        self.cancel()
        self._pending = value
        self._task = asyncio.create_task(self._publicar_tras_espera(value))

    def cancel(self) -> None:
        """Descarta el valor pendiente sin publicarlo."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._pending = None

    async def flush(self) -> None:
        """Publica de inmediato el valor pendiente, si existe."""
        if not self.is_pending:
            return
        value = self._pending
        self.cancel()
        await self._publicar(value)

    async def _publicar_tras_espera(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._task = None
        self._pending = None
        await self._publicar(value)

    async def _publicar(self, value: T) -> None:
        self._value = value
        if self._callback is not None:
            try:
                await self._callback(value)
            except Exception as exc:
                logger.error(f"❌ Error en callback de debounce: {exc}")
