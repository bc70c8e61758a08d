from .coordinador_busqueda import PaymentStoreSearchCoordinator
from .ejecutor_busqueda import SearchExecutor, SearchKind, SearchPlan, construir_plan
from .filtros import filtrar_por_pestana, filtrar_tiendas
from .secciones import SectionFetchers

__all__ = [
    "PaymentStoreSearchCoordinator",
    "SearchExecutor",
    "SearchKind",
    "SearchPlan",
    "construir_plan",
    "SectionFetchers",
    "filtrar_tiendas",
    "filtrar_por_pestana",
]
