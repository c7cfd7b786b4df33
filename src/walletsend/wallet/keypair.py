"""
Keypair-backed wallet SDK for development.

Answers the embedded wallet SDK contract from a local solana-keygen keypair,
so the pipeline can run end to end against devnet or a local validator.
"""

import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from solders.keypair import Keypair

from walletsend.config import WalletSendConfig, get_config
from walletsend.wallet.sdk import Callback, SignTransactionRequest

logger = structlog.get_logger(__name__)


def load_keypair(key_path: str) -> Keypair:
    """
    Load a keypair from a solana-keygen JSON file (array of 64 byte values).

    Args:
        key_path: Path to the keypair file
    """
    path = Path(key_path)
    if not path.exists():
        raise FileNotFoundError(f"Keypair file not found: {key_path}")

    with open(path) as f:
        secret = json.load(f)

    return Keypair.from_bytes(bytes(secret))


def save_keypair(keypair: Keypair, key_path: str) -> None:
    """Write a keypair in solana-keygen JSON format."""
    path = Path(key_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(list(bytes(keypair)), f)


class KeypairWalletSdk:
    """
    WalletSdk implementation that signs with a local keypair.

    Callbacks fire synchronously from inside the call. With ``approve=False``
    every signing request is answered with a user rejection.

    WARNING: Development only. The key lives in process memory.
    """

    def __init__(self, keypair: Keypair, approve: bool = True):
        self.keypair = keypair
        self.approve = approve

    @classmethod
    def from_config(cls, config: Optional[WalletSendConfig] = None) -> "KeypairWalletSdk":
        """Load the keypair named by ``wallet_keypair_path``."""
        config = config or get_config()
        if not config.wallet_keypair_path:
            raise ValueError("No wallet keypair configured")

        sdk = cls(load_keypair(config.wallet_keypair_path))
        logger.info("keypair_wallet_loaded", address=str(sdk.keypair.pubkey()))
        return sdk

    def get_wallet(self, callback: Callback) -> None:
        callback.on_success(json.dumps({
            "status": "SUCCESS",
            "wallet": {"solAddress": str(self.keypair.pubkey())},
        }))

    def sign_transaction(self, transaction: str, reason: str, callback: Callback) -> None:
        if not self.approve:
            callback.on_failure(json.dumps({
                "status": "USER_REQUEST_DENIED",
                "reason": "user rejected",
            }))
            return

        try:
            request = SignTransactionRequest.model_validate_json(transaction)
            message = bytes.fromhex(request.serialized_transaction_message.removeprefix("0x"))
        except (ValidationError, ValueError) as e:
            callback.on_failure(json.dumps({"status": "INVALID_REQUEST", "reason": str(e)}))
            return

        signature = self.keypair.sign_message(message)
        logger.debug("keypair_wallet_signed", reason=reason, message_length=len(message))
        callback.on_success(json.dumps({
            "status": "SUCCESS",
            "signature": "0x" + bytes(signature).hex(),
        }))

    def resume(self, url: str) -> bool:
        # No out-of-app authorization flow to complete.
        return False
