"""
Error taxonomy for the transfer pipeline.

Every failure that ends a transfer attempt is a TransferError subclass. The
``reason`` attribute carries the originating text unchanged so it can be
shown to the user as-is.
"""

from typing import Any, Optional


class TransferError(Exception):
    """Base class for failures that end a transfer attempt."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidAddress(TransferError):
    """Raised when an account address does not parse as a public key."""

    def __init__(self, address: str, detail: Optional[str] = None):
        message = f"Invalid address: {address!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.address = address


class InvalidAmount(TransferError):
    """Raised when a transfer amount is not a positive u64."""

    def __init__(self, amount: Any):
        super().__init__(f"Invalid amount: {amount!r} (expected 1..2**64-1 lamports)")
        self.amount = amount


class NetworkUnavailable(TransferError):
    """Raised on transport-level failure talking to the RPC endpoint."""
    pass


class MalformedResponse(TransferError):
    """Raised when a response does not match its expected schema."""
    pass


class RpcRejected(TransferError):
    """Raised when the node refuses a request with a JSON-RPC error."""

    STALE_BLOCKHASH_MARKERS = ("blockhash not found", "blockhashnotfound")

    def __init__(self, reason: str, code: Optional[int] = None, data: Any = None):
        super().__init__(reason)
        self.code = code
        self.data = data

    @property
    def is_stale_blockhash(self) -> bool:
        """True when the node rejected the transaction for an expired blockhash."""
        text = f"{self.reason} {self.data!r}".lower()
        return any(marker in text for marker in self.STALE_BLOCKHASH_MARKERS)


class SigningRejected(TransferError):
    """Raised when the signing authority answers with its failure callback."""
    pass


class SignatureParseError(TransferError):
    """Raised when a signing response carries no usable signature."""
    pass


class SignatureMismatch(SignatureParseError):
    """Raised when a returned signature does not verify for the fee payer."""
    pass


class TimedOut(TransferError):
    """Raised when the wallet SDK does not answer in time."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(f"{operation} timed out after {timeout_seconds:g}s")
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class WalletRequestFailed(TransferError):
    """Raised when the wallet SDK answers a wallet lookup with its failure callback."""
    pass
