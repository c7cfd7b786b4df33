"""
Embedded wallet SDK contract.

The custodial wallet SDK is reached only through callback-style calls that
answer with raw JSON text. This module declares that contract and the schemas
of the payloads it returns.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Callback:
    """Success/failure pair handed to an SDK call. Exactly one fires."""
    on_success: Callable[[str], None]
    on_failure: Callable[[str], None]


class WalletSdk(Protocol):
    """Callback interface of the embedded wallet SDK."""

    def get_wallet(self, callback: Callback) -> None:
        """Look up the user's wallet. Success payload: ``{"wallet": {"solAddress": ...}}``."""
        ...

    def sign_transaction(self, transaction: str, reason: str, callback: Callback) -> None:
        """
        Ask the user to sign a transaction message.

        Args:
            transaction: JSON request ``{"serializedTransactionMessage": "0x..."}``
            reason: Human-readable reason shown to the user
            callback: Receives ``{"signature": ...}`` on success
        """
        ...

    def resume(self, url: str) -> bool:
        """Hand an out-of-app authorization redirect back to the SDK."""
        ...


class WalletInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sol_address: str = Field(alias="solAddress", min_length=1)


class WalletResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    wallet: WalletInfo


class SignatureResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    signature: str = Field(min_length=1)


class SignTransactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    serialized_transaction_message: str = Field(alias="serializedTransactionMessage")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def failure_reason(payload: str) -> str:
    """
    Extract the human-readable reason from a failure callback payload.

    Prefers ``reason``, then ``status``, then ``error``; falls back to the raw
    text when the payload is not a JSON object or has none of them.
    """
    try:
        data: Any = json.loads(payload)
    except (TypeError, ValueError):
        return payload

    if isinstance(data, dict):
        for key in ("reason", "status", "error"):
            value: Optional[Any] = data.get(key)
            if isinstance(value, str) and value:
                return value
    return payload
