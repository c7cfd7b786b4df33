"""
Transaction Signer - obtains signatures from the external wallet.

The signing key never enters this process. The signable message is handed to
the wallet SDK and the returned signature is attached to the fee payer's slot.
"""

import base64
import re
from dataclasses import dataclass
from typing import Tuple

import structlog
from pydantic import ValidationError

from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from walletsend.errors import SignatureMismatch, SignatureParseError
from walletsend.tx.builder import UnsignedTransaction
from walletsend.wallet.client import WalletClient
from walletsend.wallet.sdk import SignatureResponse

logger = structlog.get_logger(__name__)

SIGNATURE_LENGTH = 64

_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]+$")


def parse_signature(encoded: str) -> Signature:
    """
    Decode a signature returned by the wallet.

    Accepts ``0x``-prefixed hex, bare hex of 64 bytes, or base58.

    Raises:
        SignatureParseError: If the value is not a 64-byte signature
    """
    text = encoded.strip()

    try:
        if text[:2].lower() == "0x":
            raw = bytes.fromhex(text[2:])
        elif len(text) == SIGNATURE_LENGTH * 2 and _HEX_PATTERN.match(text):
            raw = bytes.fromhex(text)
        else:
            return Signature.from_string(text)
    except Exception as e:  # noqa: BLE001
        raise SignatureParseError(f"Unrecognized signature encoding: {encoded!r}") from e

    if len(raw) != SIGNATURE_LENGTH:
        raise SignatureParseError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    return Signature.from_bytes(raw)


@dataclass(frozen=True)
class SignedTransaction:
    """An unsigned transaction plus one (signature, signer) entry per required signer."""
    unsigned: UnsignedTransaction
    signatures: Tuple[Tuple[Signature, Pubkey], ...]

    @property
    def transaction_id(self) -> str:
        """The fee payer's signature, which the network uses as the transaction id."""
        return str(self.signatures[0][0])

    def to_transaction(self) -> Transaction:
        return Transaction.populate(
            self.unsigned.message,
            [signature for signature, _ in self.signatures],
        )

    def to_bytes(self) -> bytes:
        """Wire-format transaction."""
        return bytes(self.to_transaction())

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def verify(self) -> bool:
        """Check every signature against its signer and the signable message."""
        required = self.unsigned.required_signers
        if [signer for _, signer in self.signatures] != required:
            return False

        message = self.unsigned.signable_message()
        return all(
            signature.verify(signer, message)
            for signature, signer in self.signatures
        )


def attach_signature(unsigned: UnsignedTransaction, signature: Signature) -> SignedTransaction:
    """
    Bind a signature to the fee payer's slot.

    Raises:
        SignatureMismatch: If the signature does not verify for the fee payer
    """
    required = unsigned.required_signers
    if required != [unsigned.fee_payer]:
        raise ValueError(
            f"Expected the fee payer as sole signer, message requires {len(required)}"
        )

    signed = SignedTransaction(
        unsigned=unsigned,
        signatures=((signature, unsigned.fee_payer),),
    )

    if not signed.verify():
        logger.error("signature_mismatch", fee_payer=str(unsigned.fee_payer))
        raise SignatureMismatch(
            f"Signature does not verify for fee payer {unsigned.fee_payer}"
        )

    return signed


class ExternalSigner:
    """
    Requests signatures from the wallet SDK.

    The unsigned transaction is only read; its signable message is computed
    once and that exact byte sequence is sent for signing.
    """

    def __init__(self, wallet: WalletClient):
        """
        Initialize the external signer.

        Args:
            wallet: Client for the embedded wallet SDK
        """
        self.wallet = wallet

    async def request_signature(
        self,
        unsigned: UnsignedTransaction,
        reason: str,
    ) -> Signature:
        """
        Ask the wallet to sign ``unsigned`` and parse the returned signature.

        Args:
            unsigned: Transaction to sign
            reason: Human-readable reason shown by the wallet

        Returns:
            The fee payer's signature

        Raises:
            SigningRejected: If the wallet refuses
            SignatureParseError: If the response carries no usable signature
            TimedOut: If the wallet does not answer in time
        """
        message = unsigned.signable_message()
        serialized = "0x" + message.hex()

        logger.info(
            "signature_requested",
            fee_payer=str(unsigned.fee_payer),
            message_length=len(message),
        )

        payload = await self.wallet.sign_transaction(serialized, reason)

        try:
            response = SignatureResponse.model_validate_json(payload)
        except ValidationError as e:
            raise SignatureParseError(f"No signature in signing response: {payload}") from e

        signature = parse_signature(response.signature)
        logger.debug("signature_received", signature=str(signature)[:16] + "...")
        return signature
