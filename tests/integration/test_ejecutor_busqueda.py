"""
Integration tests for SearchExecutor.

Tests query routing, result application, pagination, errors and
abort-on-supersede against a fake backend.
"""

import asyncio

import httpx
import pytest

from rez_pay_search.models import SearchErrorCode, UserLocation
from rez_pay_search.services.ejecutor_busqueda import SearchExecutor
from rez_pay_search.state.estado_busqueda import LocationUpdated

pytestmark = pytest.mark.integration

UBICACION = UserLocation.from_coordinates(12.9716, 77.5946)


@pytest.fixture
def executor(search_client, state_store, settings):
    return SearchExecutor(search_client, state_store, settings)


class TestEnrutamiento:
    """Tests for which endpoint each input reaches."""

    @pytest.mark.asyncio
    async def test_sin_texto_ni_categoria_limpia_sin_red(self, backend, executor, state_store):
        await executor.execute("", None)

        assert backend.requests == []
        assert state_store.state.search_results == ()
        assert not state_store.state.is_searching

    @pytest.mark.asyncio
    async def test_todas_con_ubicacion(self, backend, executor, state_store, tienda_factory):
        state_store.dispatch(LocationUpdated(UBICACION))
        backend.on("/stores/search-by-category/all", tienda_factory.respuesta([tienda_factory.crear()]))

        await executor.execute("", "all")

        params = backend.llamadas("/stores/search-by-category/all")[0].url.params
        assert params["sortBy"] == "distance"
        assert params["location"] == "77.5946,12.9716"
        assert params["radius"] == "10"
        assert params["page"] == "1"
        assert params["limit"] == "20"

    @pytest.mark.asyncio
    async def test_todas_sin_ubicacion(self, backend, executor, tienda_factory):
        backend.on("/stores/search-by-category/all", tienda_factory.respuesta([]))

        await executor.execute("", "all")

        params = backend.llamadas("/stores/search-by-category/all")[0].url.params
        assert params["sortBy"] == "rating"
        assert "location" not in params

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query,category,termino",
        [("pizza", None, "pizza"), ("", "cafes", "cafes"), (" chai ", "all", "chai")],
    )
    async def test_busqueda_por_termino(
        self, backend, executor, tienda_factory, query, category, termino
    ):
        backend.on("/stores/search/advanced", tienda_factory.respuesta([]))

        await executor.execute(query, category)

        params = backend.llamadas("/stores/search/advanced")[0].url.params
        assert params["search"] == termino
        assert params["sortBy"] == "rating"

    @pytest.mark.asyncio
    async def test_id_de_categoria(self, backend, executor, tienda_factory):
        category_id = "64f1c0a2b3d4e5f6a7b8c9d0"
        backend.on(
            f"/stores/category/{category_id}",
            tienda_factory.respuesta([tienda_factory.crear("Chai Point")]),
        )

        await executor.execute("", category_id)

        assert len(backend.llamadas(f"/stores/category/{category_id}")) == 1
        assert backend.llamadas("/stores/search/advanced") == []


class TestResultados:

    @pytest.mark.asyncio
    async def test_exito_aplica_resultados(self, backend, executor, state_store, tienda_factory):
        backend.on(
            "/stores/search/advanced",
            tienda_factory.respuesta(
                [tienda_factory.crear("Pizza Town"), tienda_factory.crear("Pizza Bay")],
                has_next=True,
            ),
        )

        await executor.execute("pizza", None)

        state = state_store.state
        assert [s.name for s in state.search_results] == ["Pizza Town", "Pizza Bay"]
        assert state.has_more
        assert state.current_page == 1
        assert not state.is_searching
        assert state.search_error is None

    @pytest.mark.asyncio
    async def test_pagina_siguiente_agrega(self, backend, executor, state_store, tienda_factory):
        def por_pagina(request):
            page = request.url.params["page"]
            return tienda_factory.respuesta(
                [tienda_factory.crear(f"Pagina {page}")], has_next=page == "1"
            )

        backend.on("/stores/search/advanced", por_pagina)

        await executor.execute("dosa", None, page=1)
        await executor.execute("dosa", None, page=2)

        state = state_store.state
        assert [s.name for s in state.search_results] == ["Pagina 1", "Pagina 2"]
        assert state.current_page == 2
        assert not state.has_more
        assert not state.is_loading_more

    @pytest.mark.asyncio
    async def test_respuesta_sin_exito_limpia(self, backend, executor, state_store, tienda_factory):
        backend.on("/stores/search/advanced", tienda_factory.respuesta([tienda_factory.crear()]))
        await executor.execute("pizza", None)
        backend.on(
            "/stores/search/advanced",
            tienda_factory.respuesta([tienda_factory.crear()], has_next=True, success=False),
        )

        await executor.execute("pizzzza", None)

        assert state_store.state.search_results == ()
        assert not state_store.state.has_more
        assert state_store.state.search_error is None

    @pytest.mark.asyncio
    async def test_error_del_servidor(self, backend, executor, state_store, tienda_factory):
        backend.on("/stores/search/advanced", tienda_factory.respuesta([tienda_factory.crear()]))
        await executor.execute("pizza", None)
        backend.on("/stores/search/advanced", httpx.Response(500, json={"success": False}))

        await executor.execute("pizza", None)

        state = state_store.state
        assert state.search_results == ()
        assert state.search_error.code is SearchErrorCode.SERVER_ERROR
        assert state.search_error.recoverable
        assert "500" in state.search_error.message
        assert not state.is_searching

    @pytest.mark.asyncio
    async def test_error_en_pagina_siguiente_conserva_pagina(
        self, backend, executor, state_store, tienda_factory
    ):
        def por_pagina(request):
            if request.url.params["page"] == "2":
                return httpx.Response(503)
            return tienda_factory.respuesta([tienda_factory.crear()], has_next=True)

        backend.on("/stores/search/advanced", por_pagina)

        await executor.execute("dosa", None, page=1)
        await executor.execute("dosa", None, page=2)

        state = state_store.state
        assert len(state.search_results) == 1
        assert state.current_page == 1
        assert state.search_error is not None


class TestCancelacion:
    """Tests for abort-on-supersede."""

    @pytest.mark.asyncio
    async def test_busqueda_nueva_cancela_la_anterior(
        self, backend, executor, state_store, tienda_factory, esperar_hasta
    ):
        liberar = asyncio.Event()

        async def responder(request):
            if request.url.params["search"] == "pizza":
                await liberar.wait()
                return tienda_factory.respuesta([tienda_factory.crear("Pizza Town")])
            return tienda_factory.respuesta([tienda_factory.crear("Sushi Bar")])

        backend.on("/stores/search/advanced", responder)

        primera = asyncio.create_task(executor.execute("pizza", None))
        await esperar_hasta(lambda: len(backend.requests) == 1)

        await executor.execute("sushi", None)
        liberar.set()
        await primera

        state = state_store.state
        assert [s.name for s in state.search_results] == ["Sushi Bar"]
        assert not state.is_searching
        assert not executor.in_flight

    @pytest.mark.asyncio
    async def test_cancelar_al_llamador_no_aplica_resultados(
        self, backend, executor, state_store, tienda_factory, esperar_hasta
    ):
        liberar = asyncio.Event()

        async def lenta(request):
            await liberar.wait()
            return tienda_factory.respuesta([tienda_factory.crear()])

        backend.on("/stores/search/advanced", lenta)

        tarea = asyncio.create_task(executor.execute("pizza", None))
        await esperar_hasta(lambda: len(backend.requests) == 1)
        tarea.cancel()
        with pytest.raises(asyncio.CancelledError):
            await tarea
        liberar.set()
        await asyncio.sleep(0.01)

        assert state_store.state.search_results == ()
        assert not executor.in_flight
        assert not state_store.state.is_searching

    @pytest.mark.asyncio
    async def test_cancel_current(self, backend, executor, state_store, tienda_factory, esperar_hasta):
        async def nunca(request):
            await asyncio.Event().wait()

        backend.on("/stores/search/advanced", nunca)

        tarea = asyncio.create_task(executor.execute("pizza", None))
        await esperar_hasta(lambda: executor.in_flight and len(backend.requests) == 1)
        executor.cancel_current()
        await asyncio.wait_for(tarea, timeout=1)

        assert state_store.state.search_results == ()
        assert state_store.state.search_error is None
        assert not state_store.state.is_searching
