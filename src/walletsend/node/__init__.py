"""
Node Integration Layer.

Provides abstracted access to the Solana JSON-RPC endpoint for blockhash
lookup and transaction submission.
"""

from walletsend.node.interface import BlockReference, NodeInterface
from walletsend.node.rpc import SolanaRpcAdapter

__all__ = [
    "BlockReference",
    "NodeInterface",
    "SolanaRpcAdapter",
]
