"""
Tests for the two-source status reconciler.

Covers every found/not-found combination of indexer × pending pool, plus
error handling on each side. Lookups are injected; no network.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from algosdk.error import AlgodHTTPError

from domain.enums import TransactionStatus
from domain.errors import NetworkError
from exceptions import LookupFailedError
from services.reconciler import Reconciliation, lookup_pending, reconcile

TX_ID = "TXID" + "A" * 48


def indexed(round_=1234):
    return AsyncMock(return_value={"id": TX_ID, "confirmed-round": round_})


def not_indexed():
    return AsyncMock(return_value=None)


def pool(entry):
    return AsyncMock(return_value=entry)


def unknown_to_node(message="transaction not found"):
    return AsyncMock(side_effect=LookupFailedError(message))


class TestIndexerFound:

    @pytest.mark.unit
    async def test_indexed_is_confirmed_without_asking_node(self):
        pending = pool({"confirmed-round": 0})
        result = await reconcile(TX_ID, indexed_lookup=indexed(1234), pending_lookup=pending)

        assert result == Reconciliation(TX_ID, TransactionStatus.CONFIRMED, confirmed_round=1234)
        pending.assert_not_awaited()

    @pytest.mark.unit
    async def test_indexed_wins_even_if_node_forgot_it(self):
        result = await reconcile(TX_ID, indexed_lookup=indexed(99), pending_lookup=unknown_to_node())
        assert result.status is TransactionStatus.CONFIRMED
        assert result.confirmed_round == 99


class TestIndexerNotFound:

    @pytest.mark.unit
    async def test_pool_confirmed_round(self):
        result = await reconcile(
            TX_ID, indexed_lookup=not_indexed(), pending_lookup=pool({"confirmed-round": 777, "pool-error": ""})
        )
        assert result.status is TransactionStatus.CONFIRMED
        assert result.confirmed_round == 777

    @pytest.mark.unit
    async def test_pool_error_is_failed_with_reason(self):
        result = await reconcile(
            TX_ID,
            indexed_lookup=not_indexed(),
            pending_lookup=pool({"pool-error": "overspend (account X)"}),
        )
        assert result.status is TransactionStatus.FAILED
        assert result.reason == "overspend (account X)"
        assert result.confirmed_round is None

    @pytest.mark.unit
    async def test_still_in_pool_is_pending(self):
        result = await reconcile(
            TX_ID, indexed_lookup=not_indexed(), pending_lookup=pool({"confirmed-round": 0, "pool-error": ""})
        )
        assert result == Reconciliation(TX_ID, TransactionStatus.PENDING)
        assert not result.is_terminal

    @pytest.mark.unit
    async def test_missing_fields_are_pending(self):
        result = await reconcile(TX_ID, indexed_lookup=not_indexed(), pending_lookup=pool({}))
        assert result.status is TransactionStatus.PENDING

    @pytest.mark.unit
    async def test_unknown_to_both_is_failed_with_message(self):
        result = await reconcile(
            TX_ID, indexed_lookup=not_indexed(), pending_lookup=unknown_to_node("txn does not exist")
        )
        assert result.status is TransactionStatus.FAILED
        assert result.reason == "txn does not exist"


class TestLookupErrors:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error",
        [LookupFailedError("HTTP 500"), NetworkError("indexer unreachable"), RuntimeError("boom")],
    )
    async def test_indexer_error_falls_back_to_node(self, error):
        result = await reconcile(
            TX_ID,
            indexed_lookup=AsyncMock(side_effect=error),
            pending_lookup=pool({"confirmed-round": 55}),
        )
        assert result.status is TransactionStatus.CONFIRMED
        assert result.confirmed_round == 55

    @pytest.mark.unit
    async def test_unreachable_node_propagates(self):
        """A node that cannot be reached says nothing about the transaction."""
        with pytest.raises(NetworkError):
            await reconcile(
                TX_ID,
                indexed_lookup=not_indexed(),
                pending_lookup=AsyncMock(side_effect=NetworkError("timed out")),
            )


class TestIdempotence:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "indexer,pending",
        [
            (indexed, lambda: pool({})),
            (not_indexed, lambda: pool({"confirmed-round": 3})),
            (not_indexed, lambda: pool({"pool-error": "bad"})),
            (not_indexed, lambda: pool({})),
            (not_indexed, unknown_to_node),
        ],
    )
    async def test_same_inputs_same_classification(self, indexer, pending):
        lookup_i, lookup_p = indexer(), pending()
        first = await reconcile(TX_ID, indexed_lookup=lookup_i, pending_lookup=lookup_p)
        second = await reconcile(TX_ID, indexed_lookup=lookup_i, pending_lookup=lookup_p)
        assert first == second


class TestReconciliationToDict:

    @pytest.mark.unit
    def test_confirmed_shape(self):
        data = Reconciliation(TX_ID, TransactionStatus.CONFIRMED, confirmed_round=10).to_dict()
        assert data == {"txId": TX_ID, "status": "confirmed", "confirmedRound": 10}

    @pytest.mark.unit
    def test_failed_shape_carries_pool_error(self):
        data = Reconciliation(TX_ID, TransactionStatus.FAILED, reason="overspend").to_dict()
        assert data == {"txId": TX_ID, "status": "failed", "poolError": "overspend"}

    @pytest.mark.unit
    def test_pending_shape(self):
        assert Reconciliation(TX_ID, TransactionStatus.PENDING).to_dict() == {"txId": TX_ID, "status": "pending"}


class TestDefaultLookups:
    """The live lookups wired to algorand_client, with the clients mocked."""

    @pytest.mark.unit
    async def test_pending_lookup_http_error_becomes_lookup_failed(self, mock_algod_client):
        mock_algod_client.pending_transaction_info.side_effect = AlgodHTTPError("txn not found", 404)
        with pytest.raises(LookupFailedError, match="txn not found"):
            await lookup_pending(TX_ID)

    @pytest.mark.unit
    async def test_default_reconcile_uses_indexer_then_node(self, mock_algod_client):
        mock_algod_client.pending_transaction_info.return_value = {"confirmed-round": 0, "pool-error": ""}

        async def not_found(self, url, *args, **kwargs):
            return httpx.Response(404, json={"message": "no transaction found"}, request=httpx.Request("GET", url))

        with patch("httpx.AsyncClient.get", new=not_found):
            result = await reconcile(TX_ID)

        assert result.status is TransactionStatus.PENDING
        mock_algod_client.pending_transaction_info.assert_called_once_with(TX_ID)

    @pytest.mark.unit
    async def test_default_reconcile_indexed(self, mock_algod_client):
        async def found(self, url, *args, **kwargs):
            assert url.endswith(f"/v2/transactions/{TX_ID}")
            return httpx.Response(
                200,
                json={"current-round": 2000, "transaction": {"id": TX_ID, "confirmed-round": 1500}},
                request=httpx.Request("GET", url),
            )

        with patch("httpx.AsyncClient.get", new=found):
            result = await reconcile(TX_ID)

        assert result == Reconciliation(TX_ID, TransactionStatus.CONFIRMED, confirmed_round=1500)
        mock_algod_client.pending_transaction_info.assert_not_called()
