"""
Logging estructurado por búsqueda.

Cada búsqueda abre un `search_log_context`: recibe un correlation ID propio
y su metadata (search_id, término, categoría, página) viaja en cada log
emitido dentro del contexto, también desde los clientes HTTP. Los
formatters leen ese contexto; no hay estado global que limpiar.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

from ...config import configuracion

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
_search_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("search_context", default=None)

_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
})


def get_correlation_id() -> Optional[str]:
    """Correlation ID de la búsqueda en curso, o None fuera de una búsqueda."""
    return _correlation_id.get()


def get_search_context() -> Dict[str, Any]:
    """Copia de la metadata de la búsqueda en curso."""
    return dict(_search_context.get() or {})


def _nuevo_correlation_id(search_id: Any) -> str:
    sufijo = uuid.uuid4().hex[:8]
    return f"search-{search_id}-{sufijo}" if search_id is not None else sufijo


@contextmanager
def search_log_context(**campos) -> Iterator[str]:
    """
    Abre el contexto de logging de una búsqueda.

    Los campos se suman a los de un contexto exterior y se descartan al
    salir, así búsquedas concurrentes en tareas distintas no se mezclan.
    Los campos con valor None no se registran.

    Example:
        >>> with search_log_context(search_id=3, query="pizza", page=1) as cid:
        ...     logger.info("🔍 buscando")
    """
    cid = _nuevo_correlation_id(campos.get("search_id"))
    ctx = get_search_context()
    ctx.update({k: v for k, v in campos.items() if v is not None})

    cid_token = _correlation_id.set(cid)
    ctx_token = _search_context.set(ctx)
    try:
        yield cid
    finally:
        _search_context.reset(ctx_token)
        _correlation_id.reset(cid_token)


def _contexto_actual() -> Tuple[Optional[str], Dict[str, Any]]:
    return _correlation_id.get(), _search_context.get() or {}


class StructuredFormatter(logging.Formatter):
    """
    Formatter JSON de una línea por log.

    Agrega correlation ID y bloque `search` cuando el log ocurre dentro de
    una búsqueda, y los campos pasados con `extra=`.
    """

    def __init__(self, service_name: str = "rez-pay-search"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        cid, ctx = _contexto_actual()
        if cid:
            log_data["correlation_id"] = cid
        if ctx:
            log_data["search"] = ctx

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_data, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(log_data)


class HumanReadableFormatter(logging.Formatter):
    """Formatter para consola: nivel en color, búsqueda y metadata al final."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        hora = datetime.now(timezone.utc).strftime("%H:%M:%S")
        color = self.COLORS.get(record.levelname, "")
        nivel = f"{color}{record.levelname:8}{self.RESET}"

        cid, ctx = _contexto_actual()
        busqueda = f"[{cid}] " if cid else ""
        linea = f"{hora} {nivel} {busqueda}{record.name}: {record.getMessage()}"

        if ctx:
            linea += " | " + " ".join(f"{k}={v}" for k, v in ctx.items())

        if record.exc_info:
            linea += f"\n{self.formatException(record.exc_info)}"

        return linea


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    service_name: str = "rez-pay-search",
) -> None:
    """
    Configura el logging raíz con un único handler a stdout.

    Args:
        level: Nivel (DEBUG, INFO, ...); por defecto `REZ_LOG_LEVEL`
        json_output: True para JSON, False para consola;
                    por defecto según `REZ_LOG_FORMAT`
        service_name: Valor del campo `service` en JSON
    """
    level = level or configuracion.log_level
    if json_output is None:
        json_output = configuracion.log_format.lower() == "json"

    if json_output:
        formatter: logging.Formatter = StructuredFormatter(service_name=service_name)
    else:
        formatter = HumanReadableFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
