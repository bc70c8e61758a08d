"""
Store de estado observable para la pantalla de búsqueda.

Flujo unidireccional: los componentes despachan acciones, el reducer
produce un estado nuevo y los listeners suscritos reciben el snapshot.
"""

import logging
from typing import Callable, List

from .estado_busqueda import SearchState, reducir

logger = logging.getLogger(__name__)

Listener = Callable[[SearchState], None]


class SearchStateStore:
    """Contenedor del estado; se inyecta en cada componente que lo modifica."""

    def __init__(self, initial: SearchState = None):
        self._state = initial or SearchState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SearchState:
        return self._state

    def dispatch(self, accion) -> SearchState:
        nuevo = reducir(self._state, accion)
        if nuevo is self._state:
            return nuevo
        self._state = nuevo
        for listener in list(self._listeners):
            try:
                listener(nuevo)
            except Exception as exc:
                logger.error(f"❌ Error en listener de estado ({type(accion).__name__}): {exc}")
        return nuevo

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registra un listener.

        Returns:
            Función que cancela la suscripción
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
