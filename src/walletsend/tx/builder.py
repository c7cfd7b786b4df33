"""
Transaction Builder - constructs unsigned transfer transactions.

Handles address validation, blockhash lookup and compilation of the single
System Program transfer into a legacy message.
"""

from dataclasses import dataclass
from typing import List, Union

import structlog

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from walletsend.address import parse_address
from walletsend.errors import InvalidAmount
from walletsend.node.interface import BlockReference, NodeInterface

logger = structlog.get_logger(__name__)

U64_MAX = 2**64 - 1

AddressLike = Union[str, Pubkey]


def decompile_instructions(message: Message) -> List[Instruction]:
    """
    Rebuild the instruction list of a compiled legacy message.

    Signer and writable flags are recovered from the message header, so the
    result equals the instructions the message was compiled from.
    """
    header = message.header
    keys = message.account_keys
    num_signed = header.num_required_signatures
    writable_signed = num_signed - header.num_readonly_signed_accounts
    writable_unsigned = len(keys) - header.num_readonly_unsigned_accounts

    def is_writable(index: int) -> bool:
        if index < num_signed:
            return index < writable_signed
        return index < writable_unsigned

    instructions = []
    for compiled in message.instructions:
        accounts = [
            AccountMeta(keys[index], index < num_signed, is_writable(index))
            for index in compiled.accounts
        ]
        instructions.append(
            Instruction(keys[compiled.program_id_index], bytes(compiled.data), accounts)
        )
    return instructions


def decode_signable_message(data: bytes) -> Message:
    """Parse signable message bytes back into a legacy message."""
    return Message.from_bytes(data)


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    A compiled transfer waiting for its fee payer's signature.

    The message is immutable; its bytes are the signable message.
    """
    message: Message
    fee_payer: Pubkey
    recipient: Pubkey
    lamports: int
    block_reference: BlockReference

    @property
    def recent_blockhash(self) -> Hash:
        return self.message.recent_blockhash

    @property
    def instructions(self) -> List[Instruction]:
        return decompile_instructions(self.message)

    @property
    def required_signers(self) -> List[Pubkey]:
        """Accounts that must sign, in signature-slot order."""
        num_signed = self.message.header.num_required_signatures
        return list(self.message.account_keys[:num_signed])

    def signable_message(self) -> bytes:
        """Canonical message bytes, excluding signature slots."""
        return bytes(self.message)


class TransactionBuilder:
    """
    Builds unsigned transfer transactions.

    Every build fetches its own blockhash; references are never cached.
    """

    def __init__(self, node: NodeInterface):
        """
        Initialize the transaction builder.

        Args:
            node: Node interface used for the blockhash lookup
        """
        self.node = node

    async def build(
        self,
        sender: AddressLike,
        recipient: AddressLike,
        lamports: int,
    ) -> UnsignedTransaction:
        """
        Build an unsigned transfer with ``sender`` as fee payer.

        Inputs are validated before any network call. No balance check is
        made; insufficient funds surface at submission.

        Args:
            sender: Source account and fee payer
            recipient: Destination account
            lamports: Amount in lamports

        Returns:
            Unsigned transaction holding exactly one transfer instruction

        Raises:
            InvalidAddress: If either address is malformed
            InvalidAmount: If lamports is not in 1..2**64-1
            NetworkUnavailable, MalformedResponse: From the blockhash lookup
        """
        from_pubkey = parse_address(sender)
        to_pubkey = parse_address(recipient)

        if isinstance(lamports, bool) or not isinstance(lamports, int):
            raise InvalidAmount(lamports)
        if not 0 < lamports <= U64_MAX:
            raise InvalidAmount(lamports)

        block_reference = await self.node.fetch_block_reference()

        instruction = transfer(TransferParams(
            from_pubkey=from_pubkey,
            to_pubkey=to_pubkey,
            lamports=lamports,
        ))
        message = Message.new_with_blockhash(
            [instruction],
            from_pubkey,
            block_reference.blockhash,
        )

        logger.info(
            "transfer_transaction_built",
            fee_payer=str(from_pubkey),
            recipient=str(to_pubkey),
            lamports=lamports,
            blockhash=str(block_reference.blockhash),
        )

        return UnsignedTransaction(
            message=message,
            fee_payer=from_pubkey,
            recipient=to_pubkey,
            lamports=lamports,
            block_reference=block_reference,
        )
