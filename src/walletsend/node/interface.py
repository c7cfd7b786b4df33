"""
Abstract interface for Solana node integration.

Defines the contract for blockchain access that all node adapters must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from solders.hash import Hash


@dataclass(frozen=True)
class BlockReference:
    """A recent blockhash used as the freshness anchor of one transaction."""
    blockhash: Hash
    last_valid_block_height: Optional[int] = None
    slot: Optional[int] = None
    fetched_at: datetime = field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        return str(self.blockhash)


class NodeInterface(ABC):
    """
    Abstract interface for Solana node access.

    Adapters perform no retries; retry policy belongs to the caller.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            NetworkUnavailable: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def fetch_block_reference(self) -> BlockReference:
        """
        Get the latest blockhash accepted by the node.

        Returns:
            A freshly fetched block reference

        Raises:
            NetworkUnavailable: If the node is unreachable
            MalformedResponse: If the response does not match the expected schema
        """
        pass

    @abstractmethod
    async def submit_transaction(self, signed_transaction: bytes) -> str:
        """
        Submit a signed, serialized transaction to the network.

        Args:
            signed_transaction: Wire-format transaction bytes

        Returns:
            Transaction identifier (base58 signature)

        Raises:
            RpcRejected: If the network refuses the transaction
            NetworkUnavailable: On transport-level failure
        """
        pass

    async def __aenter__(self) -> "NodeInterface":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
