"""
Pytest configuration and shared fixtures for AlgoSender tests.

Provides an in-memory SQLite DB, an ASGI test client, a mocked algod client
that signs for real but never touches the network, and a scripted reconciler.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

# Test-only settings; must be set before config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["POLL_INTERVAL_SECONDS"] = "0"
os.environ["POLL_MAX_ATTEMPTS"] = "3"
os.environ["SEND_RATE_LIMIT"] = "1000"

import asyncio
from collections import defaultdict, deque
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from algosdk import account, encoding, mnemonic, transaction
from httpx import ASGITransport, AsyncClient

import database
from domain.enums import TransactionStatus
from middleware.rate_limit import get_limiter
from services import account_service, confirmation_poller, reconciler
from services.confirmation_poller import ConfirmationPoller
from services.poller_metrics import PollerMetrics
from services.reconciler import Reconciliation

# ── Test Data ────────────────────────────────────────────────────────

VALID_WALLET_1 = encoding.encode_address(bytes(range(32)))
VALID_WALLET_2 = encoding.encode_address(bytes(range(32, 64)))
INVALID_WALLET_SHORT = VALID_WALLET_1[:40]
# One public-key character changed: right length, wrong checksum
INVALID_WALLET_BAD_CHECKSUM = VALID_WALLET_1[:5] + ("B" if VALID_WALLET_1[5] != "B" else "C") + VALID_WALLET_1[6:]

TESTNET_GENESIS_HASH = "SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI="


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session():
    """
    Fresh in-memory SQLite database for each test.

    The engine is the app's shared handle, so routes and the poller see the
    same tables.
    """
    await database.dispose_engine()
    await database.init_db()
    async with database.session_scope() as session:
        yield session
    await database.dispose_engine()


@pytest_asyncio.fixture
async def client(db_session):
    """ASGI client against the app (lifespan not run; db_session creates tables)."""
    from main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── Algorand Fixtures ────────────────────────────────────────────────


@pytest.fixture
def sender_account():
    """Throwaway keypair: (private_key, address, mnemonic)."""
    private_key, address = account.generate_account()
    return private_key, address, mnemonic.from_private_key(private_key)


@pytest.fixture
def suggested_params():
    return transaction.SuggestedParams(
        fee=1000,
        first=1000,
        last=2000,
        gh=TESTNET_GENESIS_HASH,
        gen="testnet-v1.0",
        flat_fee=True,
        min_fee=1000,
    )


@pytest.fixture
def mock_algod_client(suggested_params):
    """
    Replace the algod client with a mock.

    send_transaction returns the real txid of the signed transaction, so ids
    are unique per distinct payment just like on the network.
    """
    mock_client = MagicMock()
    mock_client.status.return_value = {"last-round": 1000}
    mock_client.suggested_params.return_value = suggested_params
    mock_client.send_transaction.side_effect = lambda stxn: stxn.get_txid()
    mock_client.pending_transaction_info.return_value = {"pool-error": "", "txn": {}}
    mock_client.account_info.return_value = {"amount": 5_000_000}

    from algorand_client import algorand_client as ac
    original_client = ac._client
    ac._client = mock_client
    yield mock_client
    ac._client = original_client


class ScriptedReconciler:
    """
    Stand-in for reconciler.reconcile().

    Results are queued per txId and consumed in order; once a queue is empty
    the last result repeats. Unscripted ids get `default(tx_id)`, pending
    unless changed.
    """

    def __init__(self):
        self.scripts: dict[str, deque] = defaultdict(deque)
        self.last: dict[str, object] = {}
        self.calls: list[str] = []
        self.default = lambda tx_id: Reconciliation(tx_id, TransactionStatus.PENDING)

    def script(self, tx_id: str, *results) -> None:
        self.scripts[tx_id].extend(results)

    def confirm(self, tx_id: str, confirmed_round: int = 4242) -> None:
        self.script(tx_id, Reconciliation(tx_id, TransactionStatus.CONFIRMED, confirmed_round=confirmed_round))

    def fail(self, tx_id: str, reason: str = "overspend") -> None:
        self.script(tx_id, Reconciliation(tx_id, TransactionStatus.FAILED, reason=reason))

    def confirm_everything(self, confirmed_round: int = 4242) -> None:
        self.default = lambda tx_id: Reconciliation(
            tx_id, TransactionStatus.CONFIRMED, confirmed_round=confirmed_round
        )

    async def __call__(self, tx_id: str, *args, **kwargs):
        self.calls.append(tx_id)
        queue = self.scripts.get(tx_id)
        if queue:
            self.last[tx_id] = queue.popleft()
        result = self.last[tx_id] if tx_id in self.last else self.default(tx_id)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def scripted_reconciler(monkeypatch):
    fake = ScriptedReconciler()
    monkeypatch.setattr(reconciler, "reconcile", fake)
    return fake


class FakeClock:
    """Injectable sleep that records requested delays instead of waiting."""

    def __init__(self):
        self.sleeps: list[float] = []

    @property
    def elapsed(self) -> float:
        return sum(self.sleeps)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def installed_poller(fake_clock):
    """Process-wide poller that never really sleeps."""
    poller = ConfirmationPoller(
        interval=2.0,
        max_attempts=3,
        sleep=fake_clock.sleep,
        metrics=PollerMetrics(),
    )
    confirmation_poller._poller = poller
    yield poller
    confirmation_poller.reset_poller()


@pytest.fixture(autouse=True)
def reset_caches():
    get_limiter().reset()
    account_service.clear_params_cache()
    yield
    get_limiter().reset()
