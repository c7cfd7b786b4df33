"""
Core module.

Contains the transfer attempt model, the submission pipeline and the wallet
session that drives it.
"""

from walletsend.core.attempt import (
    InvalidStateTransition,
    PipelineState,
    SubmissionResult,
    TransferAttempt,
)
from walletsend.core.pipeline import PipelineReusedError, SubmissionPipeline
from walletsend.core.session import AttemptInProgress, WalletSession

__all__ = [
    "AttemptInProgress",
    "InvalidStateTransition",
    "PipelineReusedError",
    "PipelineState",
    "SubmissionPipeline",
    "SubmissionResult",
    "TransferAttempt",
    "WalletSession",
]
