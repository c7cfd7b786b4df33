"""
Wallet session.

Owns the node adapter and the wallet client for one application session and
starts transfer attempts, one at a time.
"""

from typing import Optional

import structlog
from solders.pubkey import Pubkey

from walletsend.config import WalletSendConfig, get_config
from walletsend.core.attempt import SubmissionResult
from walletsend.core.pipeline import SubmissionPipeline
from walletsend.node.interface import NodeInterface
from walletsend.node.rpc import SolanaRpcAdapter
from walletsend.tx.builder import TransactionBuilder
from walletsend.tx.signer import ExternalSigner
from walletsend.wallet.client import WalletClient
from walletsend.wallet.keypair import KeypairWalletSdk
from walletsend.wallet.sdk import WalletSdk

logger = structlog.get_logger(__name__)


class AttemptInProgress(Exception):
    """Raised when a transfer is started while another is still running."""
    pass


class WalletSession:
    """
    Session-scoped entry point.

    The wallet SDK and the node adapter are constructed once and passed in,
    instead of being reached through process-wide globals.

    Usage:
        ```python
        async with WalletSession(config, sdk=my_sdk) as session:
            address = await session.wallet_address()
            result = await session.send(recipient, 1_000_000)
        ```
    """

    def __init__(
        self,
        config: Optional[WalletSendConfig] = None,
        sdk: Optional[WalletSdk] = None,
        node: Optional[NodeInterface] = None,
        wallet: Optional[WalletClient] = None,
    ):
        """
        Initialize the session.

        Args:
            config: walletsend configuration
            sdk: Embedded wallet SDK (keypair wallet from config if not provided)
            node: Custom node interface (JSON-RPC adapter if not provided)
            wallet: Prebuilt wallet client (overrides ``sdk``)
        """
        self.config = config or get_config()
        self.node = node or SolanaRpcAdapter(self.config)

        if wallet is None:
            wallet = WalletClient(
                sdk or KeypairWalletSdk.from_config(self.config),
                timeout_seconds=self.config.signer_timeout_seconds,
            )
        self.wallet = wallet

        self.builder = TransactionBuilder(self.node)
        self.signer = ExternalSigner(self.wallet)

        self._address: Optional[Pubkey] = None
        self._active: Optional[SubmissionPipeline] = None
        self._connected = False

    async def connect(self) -> None:
        if self._connected:
            return
        await self.node.connect()
        self._connected = True

    async def close(self) -> None:
        if not self._connected:
            return
        await self.node.disconnect()
        self._connected = False

    async def __aenter__(self) -> "WalletSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_busy(self) -> bool:
        return self._active is not None

    async def wallet_address(self, refresh: bool = False) -> Pubkey:
        """Get the user's Solana address from the wallet SDK (cached)."""
        if self._address is None or refresh:
            self._address = await self.wallet.get_wallet_address()
        return self._address

    async def send(
        self,
        recipient: Optional[str] = None,
        lamports: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> SubmissionResult:
        """
        Run one transfer from the session's wallet.

        Each call uses a new pipeline and so a newly fetched blockhash.

        Args:
            recipient: Destination address (config default if omitted)
            lamports: Amount in lamports (config default if omitted)
            reason: Reason shown by the wallet (config default if omitted)

        Raises:
            AttemptInProgress: If another transfer is still running
        """
        if self._active is not None:
            raise AttemptInProgress("A transfer is already in progress for this session")

        pipeline = SubmissionPipeline(self.builder, self.signer, self.node)
        self._active = pipeline
        try:
            sender = await self.wallet_address()
            return await pipeline.run(
                sender=str(sender),
                recipient=recipient or self.config.default_recipient,
                lamports=lamports if lamports is not None else self.config.default_lamports,
                reason=reason or self.config.default_reason,
            )
        finally:
            self._active = None

    def explorer_url(self, result: SubmissionResult) -> Optional[str]:
        if not result.transaction_id:
            return None
        return self.config.explorer_url(result.transaction_id)

    def resume(self, url: str) -> bool:
        """Forward an SDK authorization redirect unmodified."""
        return self.wallet.resume(url)
