"""Configuración del coordinador de búsqueda."""

from .configuracion import ConfiguracionBusqueda, configuracion

__all__ = ["ConfiguracionBusqueda", "configuracion"]
