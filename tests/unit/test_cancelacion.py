"""Unit tests for CancellationToken."""

import asyncio

import pytest

from rez_pay_search.core.cancelacion import CancellationToken
from rez_pay_search.core.exceptions import SearchCancelledError


class TestCancellationToken:

    def test_token_nuevo_no_cancelado(self):
        token = CancellationToken(label="search#1")

        assert not token.cancelled
        token.raise_if_cancelled()
        assert "active" in repr(token)

    def test_cancel_lanza_en_raise_if_cancelled(self):
        token = CancellationToken(label="search#2")
        token.cancel()

        assert token.cancelled
        with pytest.raises(SearchCancelledError, match="search#2"):
            token.raise_if_cancelled()

    def test_cancel_es_idempotente(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()

        assert token.cancelled
        assert "cancelled" in repr(token)

    @pytest.mark.asyncio
    async def test_wait_despierta_al_cancelar(self):
        token = CancellationToken()
        espera = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not espera.done()

        token.cancel()
        await asyncio.wait_for(espera, timeout=0.5)

        assert espera.done()
