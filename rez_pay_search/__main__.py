"""
Búsqueda manual de tiendas desde la terminal.

Uso:
  python -m rez_pay_search
  python -m rez_pay_search --query pizza
  python -m rez_pay_search --category cafes --lat 12.9716 --lon 77.5946
  python -m rez_pay_search --query salon --tab services --offers
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .config import configuracion
from .infrastructure.location import StaticLocationProvider
from .infrastructure.logging import configure_logging
from .models import SesionUsuario, StoreSummary, StoreTab
from .services.coordinador_busqueda import PaymentStoreSearchCoordinator


class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    END = "\033[0m"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Búsqueda de tiendas Pay-In-Store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--query", default="", help="Texto a buscar")
    parser.add_argument("--category", default=None, help="Categoría (por defecto: all)")
    parser.add_argument("--lat", type=float, help="Latitud del usuario")
    parser.add_argument("--lon", type=float, help="Longitud del usuario")
    parser.add_argument("--token", help="Token de sesión para cargar pagos recientes")
    parser.add_argument(
        "--tab",
        choices=[tab.value for tab in StoreTab],
        default=StoreTab.ALL.value,
        help="Pestaña a aplicar sobre los resultados",
    )
    parser.add_argument("--offers", action="store_true", help="Solo tiendas con ofertas")
    parser.add_argument("--cashback", action="store_true", help="Solo tiendas con cashback")
    parser.add_argument("--pages", type=int, default=1, help="Páginas a cargar")
    return parser.parse_args(argv)


def _imprimir_seccion(titulo: str, stores) -> None:
    print(f"\n{Colors.BOLD}{Colors.CYAN}{titulo} ({len(stores)}){Colors.END}")
    for store in stores:
        print(f"  {_linea(store)}")


def _linea(store: StoreSummary) -> str:
    distancia = f"{store.distance:.1f} km" if store.distance is not None else "-"
    abierta = f"{Colors.GREEN}abierta{Colors.END}" if store.is_open else f"{Colors.YELLOW}cerrada{Colors.END}"
    return (
        f"{store.name or store.id} · {store.category.name} · ★{store.ratings.average:.1f} "
        f"· {distancia} · cashback {store.max_cashback:g}% · {abierta}"
    )


async def run(args: argparse.Namespace) -> int:
    provider = StaticLocationProvider(args.lat, args.lon)
    sesion = SesionUsuario(is_authenticated=bool(args.token), token=args.token)

    async with PaymentStoreSearchCoordinator.crear(
        location_provider=provider,
        obtener_sesion=lambda: sesion,
    ) as coordinador:
        await coordinador.start()

        if args.category:
            await coordinador.set_selected_category(args.category)
        if args.query:
            coordinador.set_search_query(args.query)
            await coordinador.flush_search_query()

        for _ in range(max(args.pages, 1) - 1):
            await coordinador.load_more()

        coordinador.set_filter("offers_available", args.offers)
        coordinador.set_filter("cashback", args.cashback)
        coordinador.set_active_tab(StoreTab(args.tab))

        state = coordinador.state
        _imprimir_seccion("Populares", state.popular_stores)
        _imprimir_seccion("Recientes", state.recent_stores)
        _imprimir_seccion("Cercanas", state.nearby_stores)
        _imprimir_seccion("Resultados", coordinador.filtered_stores())

        if state.search_error is not None:
            print(f"\n{Colors.YELLOW}⚠️ {state.search_error.message}{Colors.END}")
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(
        level=configuracion.log_level,
        json_output=configuracion.log_format.lower() == "json",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
