"""
Unit tests for performance metrics.

Tests recording, outcome counters and the async timer.
"""

import asyncio

import pytest

from rez_pay_search.core.exceptions import SearchCancelledError, StoreApiError
from rez_pay_search.core.metrics import PerformanceMetrics


class TestPerformanceMetrics:

    def test_initialization(self):
        """Test metrics starts empty and enabled."""
        metrics = PerformanceMetrics()

        assert metrics.enabled
        assert metrics.operations == {}
        assert len(metrics.history) == 0

    def test_enable_disable(self):
        metrics = PerformanceMetrics(enabled=False)
        metrics.record("stores.nearby", 10)
        assert metrics.get_stats("stores.nearby") is None

        metrics.enable()
        metrics.record("stores.nearby", 10)
        assert metrics.get_stats("stores.nearby")["total_calls"] == 1

        metrics.disable()
        assert not metrics.enabled

    def test_get_stats(self):
        """Test computed statistics."""
        metrics = PerformanceMetrics()
        for duration in (10, 20, 30, 40):
            metrics.record("stores.featured", duration)
        metrics.record("stores.featured", 50, outcome="failure")

        stats = metrics.get_stats("stores.featured")

        assert stats["total_calls"] == 5
        assert stats["success_calls"] == 4
        assert stats["failure_calls"] == 1
        assert stats["avg_ms"] == 30
        assert stats["min_ms"] == 10
        assert stats["max_ms"] == 50
        assert stats["p50_ms"] == 30

    def test_historial_acotado(self):
        metrics = PerformanceMetrics(max_history=3)
        for i in range(5):
            metrics.record("stores.by_id", i)

        assert len(metrics.history) == 3
        assert metrics.get_stats("stores.by_id")["total_calls"] == 5

    def test_reset_por_operacion(self):
        metrics = PerformanceMetrics()
        metrics.record("a", 1)
        metrics.record("b", 2)

        metrics.reset("a")

        assert metrics.get_stats("a") is None
        assert [m.operation for m in metrics.history] == ["b"]

        metrics.reset()
        assert metrics.get_all_stats() == {}


class TestTimer:

    @pytest.mark.asyncio
    async def test_timer_exito(self):
        metrics = PerformanceMetrics()

        async with metrics.timer("stores.nearby", metadata={"path": "/stores/nearby"}):
            await asyncio.sleep(0)

        stats = metrics.get_stats("stores.nearby")
        assert stats["success_calls"] == 1
        assert metrics.history[-1].metadata == {"path": "/stores/nearby"}

    @pytest.mark.asyncio
    async def test_timer_fallo(self):
        metrics = PerformanceMetrics()

        with pytest.raises(StoreApiError):
            async with metrics.timer("stores.featured"):
                raise StoreApiError("HTTP error! status: 500")

        assert metrics.get_stats("stores.featured")["failure_calls"] == 1

    @pytest.mark.asyncio
    async def test_timer_busqueda_cancelada_no_es_fallo(self):
        metrics = PerformanceMetrics()

        with pytest.raises(SearchCancelledError):
            async with metrics.timer("stores.advanced_search"):
                raise SearchCancelledError("superseded")

        stats = metrics.get_stats("stores.advanced_search")
        assert stats["cancelled_calls"] == 1
        assert stats["failure_calls"] == 0

    @pytest.mark.asyncio
    async def test_timer_deshabilitado(self):
        metrics = PerformanceMetrics(enabled=False)

        async with metrics.timer("stores.nearby"):
            pass

        assert metrics.get_all_stats() == {}
