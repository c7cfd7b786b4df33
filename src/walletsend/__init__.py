"""
walletsend

Builds Solana transfer transactions, has them signed by a custodial embedded
wallet SDK, and submits them to a JSON-RPC endpoint.
"""

__version__ = "0.1.0"

from walletsend.core.attempt import PipelineState, SubmissionResult
from walletsend.core.pipeline import SubmissionPipeline
from walletsend.core.session import WalletSession

__all__ = [
    "PipelineState",
    "SubmissionPipeline",
    "SubmissionResult",
    "WalletSession",
]
