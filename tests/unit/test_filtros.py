"""Unit tests for filter chips and tabs."""

import pytest

from rez_pay_search.models import StoreFilters, StoreTab, UserLocation
from rez_pay_search.services.filtros import filtrar_por_pestana, filtrar_tiendas

SIN_FILTROS = StoreFilters(near_me=False)
UBICACION = UserLocation.from_coordinates(12.9716, 77.5946)


@pytest.fixture
def tiendas(tienda_factory):
    return {
        "lejana": tienda_factory.resumen("Lejana", distance=7.5),
        "cercana": tienda_factory.resumen("Cercana", distance=0.8),
        "con_coordenadas": tienda_factory.resumen(
            "Sin Distancia", location={"coordinates": [77.6, 12.97]}
        ),
        "sin_posicion": tienda_factory.resumen("Sin Posicion"),
        "cashback": tienda_factory.resumen(
            "Con Cashback", distance=2.0, rewardRules={"baseCashbackPercent": 5}
        ),
        "marca": tienda_factory.resumen("Starbucks", distance=3.0),
        "servicio": tienda_factory.resumen(
            "Glow Studio", category={"name": "Salon", "slug": "salon"}
        ),
    }


class TestFiltroCercaDeMi:

    def test_ordena_por_distancia_y_descarta_sin_posicion(self, tiendas):
        resultado = filtrar_tiendas(
            tiendas.values(), StoreFilters(near_me=True), user_location=UBICACION
        )

        nombres = [s.name for s in resultado]
        assert nombres == ["Cercana", "Con Cashback", "Starbucks", "Lejana", "Sin Distancia"]

    def test_sin_ubicacion_no_filtra(self, tiendas):
        resultado = filtrar_tiendas(tiendas.values(), StoreFilters(near_me=True))

        assert len(resultado) == len(tiendas)

    def test_no_modifica_la_entrada(self, tiendas):
        entrada = list(tiendas.values())
        filtrar_tiendas(entrada, StoreFilters(near_me=True), user_location=UBICACION)

        assert entrada == list(tiendas.values())


class TestFiltrosDeOfertas:

    def test_ofertas(self, tiendas):
        resultado = filtrar_tiendas(
            tiendas.values(), StoreFilters(near_me=False, offers_available=True)
        )
        assert [s.name for s in resultado] == ["Con Cashback"]

    def test_cashback_usa_max_cashback(self, tienda_factory):
        solo_max = tienda_factory.resumen("Max Cashback", maxCashback=3)
        sin_nada = tienda_factory.resumen("Nada")

        resultado = filtrar_tiendas([solo_max, sin_nada], StoreFilters(near_me=False, cashback=True))

        assert resultado == [solo_max]


class TestPestanas:

    def test_todas(self, tiendas):
        assert len(filtrar_por_pestana(tiendas.values(), StoreTab.ALL)) == len(tiendas)

    def test_marcas(self, tiendas):
        resultado = filtrar_tiendas(tiendas.values(), SIN_FILTROS, StoreTab.BRANDS)
        assert [s.name for s in resultado] == ["Starbucks"]

    def test_servicios(self, tiendas):
        resultado = filtrar_tiendas(tiendas.values(), SIN_FILTROS, StoreTab.SERVICES)
        assert [s.name for s in resultado] == ["Glow Studio"]

    def test_locales(self, tiendas):
        resultado = filtrar_tiendas(tiendas.values(), SIN_FILTROS, "local")

        nombres = {s.name for s in resultado}
        assert "Starbucks" not in nombres
        assert "Glow Studio" not in nombres
        assert "Cercana" in nombres

    def test_filtro_y_pestana_combinados(self, tiendas):
        resultado = filtrar_tiendas(
            tiendas.values(),
            StoreFilters(near_me=True),
            StoreTab.BRANDS,
            user_location=UBICACION,
        )
        assert [s.name for s in resultado] == ["Starbucks"]
