"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from typing import Callable, List, Optional

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.transaction import Transaction

from walletsend.config import Cluster, WalletSendConfig
from walletsend.errors import RpcRejected
from walletsend.node.interface import BlockReference, NodeInterface
from walletsend.tx.builder import TransactionBuilder
from walletsend.tx.signer import ExternalSigner
from walletsend.wallet.client import WalletClient
from walletsend.wallet.keypair import KeypairWalletSdk
from walletsend.wallet.sdk import Callback


WELL_KNOWN_SENDER = "11111111111111111111111111111111"
RECIPIENT = "6xEeDTksyAhBz7QBgzPmYxJN2zbmT7twx5rr1ejnaona"
STALE_BLOCKHASH_ERROR = "Transaction simulation failed: Blockhash not found"


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> WalletSendConfig:
    """Create a test configuration."""
    return WalletSendConfig(
        cluster=Cluster.DEVNET,
        rpc_url="http://rpc.test",
        signer_timeout_seconds=5,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Node Interface
# ============================================================================

class MockNodeInterface(NodeInterface):
    """
    Mock node that hands out unique blockhashes and accepts transactions
    whose blockhash has not been expired.
    """

    def __init__(self):
        self.fetch_count = 0
        self.valid_blockhashes: set = set()
        self.submitted: List[bytes] = []
        self.submit_error: Optional[Exception] = None
        self.fetch_error: Optional[Exception] = None
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def fetch_block_reference(self) -> BlockReference:
        if self.fetch_error is not None:
            raise self.fetch_error
        self.fetch_count += 1
        blockhash = Hash(self.fetch_count.to_bytes(32, "big"))
        self.valid_blockhashes.add(blockhash)
        return BlockReference(
            blockhash=blockhash,
            last_valid_block_height=1000 + self.fetch_count,
            slot=500 + self.fetch_count,
        )

    async def submit_transaction(self, signed_transaction: bytes) -> str:
        if self.submit_error is not None:
            raise self.submit_error
        tx = Transaction.from_bytes(signed_transaction)
        if tx.message.recent_blockhash not in self.valid_blockhashes:
            raise RpcRejected(STALE_BLOCKHASH_ERROR, code=-32002)
        self.submitted.append(signed_transaction)
        return str(tx.signatures[0])

    def expire_blockhashes(self) -> None:
        """Simulate every fetched blockhash aging out."""
        self.valid_blockhashes.clear()


@pytest.fixture
def mock_node() -> MockNodeInterface:
    """Create a mock node interface."""
    return MockNodeInterface()


# ============================================================================
# Wallet SDK Fakes
# ============================================================================

class ScriptedWalletSdk:
    """
    Wallet SDK fake whose answers are set per test.

    ``sign_handler`` receives (request_json, reason, callback). When it is
    None the call is recorded and no callback fires.
    """

    def __init__(self, keypair: Optional[Keypair] = None):
        self.keypair = keypair
        self.wallet_payload: Optional[str] = None
        self.wallet_failure: Optional[str] = None
        self.sign_handler: Optional[Callable[[str, str, Callback], None]] = None
        self.sign_requests: List[tuple] = []
        self.pending_callbacks: List[Callback] = []
        self.resumed_urls: List[str] = []

    def get_wallet(self, callback: Callback) -> None:
        if self.wallet_failure is not None:
            callback.on_failure(self.wallet_failure)
            return
        payload = self.wallet_payload
        if payload is None and self.keypair is not None:
            payload = json.dumps({"wallet": {"solAddress": str(self.keypair.pubkey())}})
        callback.on_success(payload)

    def sign_transaction(self, transaction: str, reason: str, callback: Callback) -> None:
        self.sign_requests.append((transaction, reason))
        if self.sign_handler is None:
            self.pending_callbacks.append(callback)
            return
        self.sign_handler(transaction, reason, callback)

    def resume(self, url: str) -> bool:
        self.resumed_urls.append(url)
        return True


def message_from_request(request_json: str) -> bytes:
    """Extract the signable bytes from a sign request."""
    serialized = json.loads(request_json)["serializedTransactionMessage"]
    assert serialized.startswith("0x")
    return bytes.fromhex(serialized[2:])


def keypair_sign_handler(keypair: Keypair) -> Callable[[str, str, Callback], None]:
    """Handler that signs the requested message with ``keypair``."""
    def handler(request_json: str, reason: str, callback: Callback) -> None:
        signature = keypair.sign_message(message_from_request(request_json))
        callback.on_success(json.dumps({"signature": "0x" + bytes(signature).hex()}))
    return handler


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def scripted_sdk(keypair) -> ScriptedWalletSdk:
    sdk = ScriptedWalletSdk(keypair)
    sdk.sign_handler = keypair_sign_handler(keypair)
    return sdk


@pytest.fixture
def wallet_client(scripted_sdk) -> WalletClient:
    return WalletClient(scripted_sdk, timeout_seconds=5)


@pytest.fixture
def keypair_sdk(keypair) -> KeypairWalletSdk:
    return KeypairWalletSdk(keypair)


@pytest.fixture
def builder(mock_node) -> TransactionBuilder:
    return TransactionBuilder(mock_node)


@pytest.fixture
def external_signer(wallet_client) -> ExternalSigner:
    return ExternalSigner(wallet_client)
