"""
Wallet client - awaitable access to the callback-based wallet SDK.

Each SDK call is turned into a single-shot awaitable: the first callback to
fire resolves it, any later callback is logged and dropped.
"""

import asyncio
from typing import Callable, Optional, Tuple, Type

import structlog
from pydantic import ValidationError
from solders.pubkey import Pubkey

from walletsend.address import parse_address
from walletsend.errors import (
    MalformedResponse,
    SigningRejected,
    TimedOut,
    TransferError,
    WalletRequestFailed,
)
from walletsend.wallet.sdk import (
    Callback,
    SignTransactionRequest,
    WalletResponse,
    WalletSdk,
    failure_reason,
)

logger = structlog.get_logger(__name__)


class WalletClient:
    """
    Session-scoped client for the embedded wallet SDK.

    The SDK instance is injected rather than looked up globally, so one
    application session owns one configured client.
    """

    def __init__(self, sdk: WalletSdk, timeout_seconds: Optional[float] = None):
        """
        Initialize the wallet client.

        Args:
            sdk: Embedded wallet SDK implementation
            timeout_seconds: Maximum wait for any SDK callback (None waits forever)
        """
        self.sdk = sdk
        self.timeout_seconds = timeout_seconds

    async def _call(
        self,
        operation: str,
        invoke: Callable[[Callback], None],
        error_type: Type[TransferError],
    ) -> Tuple[bool, str]:
        """
        Run one SDK call and wait for its callback.

        Callbacks may fire on any thread. An exception raised by the SDK call
        itself is re-raised as ``error_type``.

        Returns:
            (succeeded, raw JSON payload)
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def resolve(succeeded: bool, payload: str) -> None:
            def settle() -> None:
                if future.done():
                    logger.warning(
                        "wallet_callback_ignored",
                        operation=operation,
                        succeeded=succeeded,
                    )
                    return
                future.set_result((succeeded, payload))

            try:
                loop.call_soon_threadsafe(settle)
            except RuntimeError:
                logger.warning("wallet_callback_after_close", operation=operation)

        callback = Callback(
            on_success=lambda payload: resolve(True, payload),
            on_failure=lambda payload: resolve(False, payload),
        )

        logger.debug("wallet_call_started", operation=operation)
        try:
            invoke(callback)
        except Exception as e:
            logger.error("wallet_call_raised", operation=operation, error=str(e))
            raise error_type(str(e) or type(e).__name__) from e

        if self.timeout_seconds is None:
            return await future

        try:
            return await asyncio.wait_for(future, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error(
                "wallet_call_timeout",
                operation=operation,
                timeout_seconds=self.timeout_seconds,
            )
            raise TimedOut(operation, self.timeout_seconds) from e

    async def get_wallet_address(self) -> Pubkey:
        """
        Ask the SDK for the user's wallet and return its Solana address.

        Raises:
            WalletRequestFailed: If the SDK fails the lookup or raises
            MalformedResponse: If the success payload has no ``wallet.solAddress``
            InvalidAddress: If the address does not parse
        """
        succeeded, payload = await self._call(
            "get_wallet", self.sdk.get_wallet, WalletRequestFailed,
        )

        if not succeeded:
            reason = failure_reason(payload)
            logger.warning("wallet_lookup_failed", reason=reason)
            raise WalletRequestFailed(reason)

        try:
            response = WalletResponse.model_validate_json(payload)
        except ValidationError as e:
            raise MalformedResponse(f"Malformed getWallet response: {e}") from e

        address = parse_address(response.wallet.sol_address)
        logger.info("wallet_address_resolved", address=str(address))
        return address

    async def sign_transaction(self, serialized_message: str, reason: str) -> str:
        """
        Ask the SDK to sign a serialized transaction message.

        Args:
            serialized_message: ``"0x"``-prefixed hex of the signable message
            reason: Reason shown to the user

        Returns:
            Raw JSON payload of the success callback

        Raises:
            SigningRejected: If the SDK refuses or raises
            TimedOut: If no callback fires within the configured timeout
        """
        request = SignTransactionRequest(serialized_transaction_message=serialized_message)
        request_json = request.to_json()

        succeeded, payload = await self._call(
            "sign_transaction",
            lambda callback: self.sdk.sign_transaction(request_json, reason, callback),
            SigningRejected,
        )

        if not succeeded:
            rejection = failure_reason(payload)
            logger.warning("signing_rejected", reason=rejection)
            raise SigningRejected(rejection)

        return payload

    def resume(self, url: str) -> bool:
        """Forward an authorization redirect URL to the SDK unmodified."""
        handled = self.sdk.resume(url)
        logger.debug("wallet_resume_forwarded", handled=handled)
        return handled
