"""
Algorand client singleton for TestNet interaction.

Wraps the synchronous algod client (run in the thread pool with a per-call
deadline) and the indexer REST API (httpx). Transport failures and timeouts
surface as NetworkError; HTTP errors returned by algod are left as
AlgodHTTPError for the caller to classify.
"""
import asyncio
import logging

import httpx
from algosdk.v2client import algod

from config import settings
from domain.errors import NetworkError
from exceptions import LookupFailedError
from services.async_executor import run_with_timeout

logger = logging.getLogger(__name__)


class AlgorandClient:
    """Singleton Algorand client for TestNet operations."""

    _instance = None
    _client = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(AlgorandClient, cls).__new__(cls)
        return cls._instance

    def _initialize_client(self):
        """Initialize the Algorand algod client (no network round-trip)."""
        self._client = algod.AlgodClient(
            algod_token=settings.algorand_algod_token,
            algod_address=settings.algorand_algod_address,
        )
        logger.info(f"Algod client configured for {settings.algorand_algod_address}")

    @property
    def client(self) -> algod.AlgodClient:
        """Get the algod client instance."""
        if self._client is None:
            self._initialize_client()
        return self._client

    @property
    def timeout(self) -> float:
        return settings.algorand_request_timeout_seconds

    async def _call(self, operation: str, func, *args, **kwargs):
        """Run a blocking algod call with the configured deadline."""
        try:
            return await run_with_timeout(self.timeout, func, *args, **kwargs)
        except asyncio.TimeoutError:
            logger.warning(f"Algod {operation} timed out after {self.timeout}s")
            raise NetworkError(f"Algorand node did not respond in time ({operation})")
        except OSError as e:
            # URLError and socket errors: node unreachable
            logger.warning(f"Algod {operation} failed: {e}")
            raise NetworkError(f"Algorand node unreachable ({operation})")

    # ── algod ───────────────────────────────────────────────────────

    async def status(self) -> dict:
        return await self._call("status", self.client.status)

    async def get_suggested_params(self):
        """Fetch suggested transaction parameters from TestNet."""
        return await self._call("suggested_params", self.client.suggested_params)

    async def send_transaction(self, signed_txn) -> str:
        """
        Submit a signed transaction to TestNet.

        Returns:
            Transaction ID
        """
        tx_id = await self._call("send_transaction", self.client.send_transaction, signed_txn)
        logger.info(f"Transaction submitted successfully: {tx_id}")
        return tx_id

    async def pending_transaction_info(self, tx_id: str) -> dict:
        """Look up a transaction in the node's pending pool."""
        return await self._call("pending_transaction_info", self.client.pending_transaction_info, tx_id)

    async def account_info(self, address: str) -> dict:
        return await self._call("account_info", self.client.account_info, address)

    # ── indexer ─────────────────────────────────────────────────────

    async def lookup_indexed_transaction(self, tx_id: str) -> dict | None:
        """
        Look up a committed transaction on the Algorand Indexer.

        Returns:
            The indexer's transaction dict, or None if it is not indexed (404).

        Raises:
            LookupFailedError on any other HTTP error, NetworkError on
            transport failures or timeout.
        """
        url = f"{settings.algorand_indexer_url}/v2/transactions/{tx_id}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise LookupFailedError(f"Indexer lookup failed: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise NetworkError(f"Algorand indexer unreachable: {type(e).__name__}")

        return data.get("transaction")


# Global client instance
algorand_client = AlgorandClient()
