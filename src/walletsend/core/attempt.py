"""
Transfer attempt model.

Tracks one pass through the submission pipeline and its outcome.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from walletsend.errors import TransferError


class PipelineState(str, Enum):
    """State of a transfer attempt."""
    IDLE = "idle"
    BUILDING_TRANSACTION = "building_transaction"
    AWAITING_SIGNATURE = "awaiting_signature"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"     # Terminal
    FAILED = "failed"           # Terminal


# Forward-only: each state may move to the next step or to FAILED.
_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.BUILDING_TRANSACTION},
    PipelineState.BUILDING_TRANSACTION: {PipelineState.AWAITING_SIGNATURE, PipelineState.FAILED},
    PipelineState.AWAITING_SIGNATURE: {PipelineState.SUBMITTING, PipelineState.FAILED},
    PipelineState.SUBMITTING: {PipelineState.SUCCEEDED, PipelineState.FAILED},
    PipelineState.SUCCEEDED: set(),
    PipelineState.FAILED: set(),
}


class InvalidStateTransition(Exception):
    """Raised when an attempt is moved backwards or out of a terminal state."""

    def __init__(self, current: PipelineState, target: PipelineState):
        super().__init__(f"Cannot move attempt from {current.value} to {target.value}")
        self.current = current
        self.target = target


@dataclass
class TransferAttempt:
    """
    One attempt to build, sign and submit a transfer.

    Attributes:
        attempt_id: Unique identifier for the attempt
        sender: Fee payer address as given
        recipient: Destination address as given
        lamports: Amount in lamports
        reason: Reason shown by the wallet when signing
        state: Current pipeline state
        history: States visited, in order
        transaction_id: Identifier returned by the network on success
        error: Failure cause, kept as raised
    """

    sender: str
    recipient: str
    lamports: int
    reason: str = ""
    attempt_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])

    transaction_id: Optional[str] = None
    blockhash: Optional[str] = None
    error: Optional[BaseException] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (PipelineState.SUCCEEDED, PipelineState.FAILED)

    def _move(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(self.state, target)
        self.state = target
        self.history.append(target)
        self.updated_at = datetime.utcnow()
        if self.is_terminal:
            self.finished_at = self.updated_at

    def mark_building(self) -> None:
        self._move(PipelineState.BUILDING_TRANSACTION)

    def mark_awaiting_signature(self, blockhash: str) -> None:
        self.blockhash = blockhash
        self._move(PipelineState.AWAITING_SIGNATURE)

    def mark_submitting(self) -> None:
        self._move(PipelineState.SUBMITTING)

    def mark_succeeded(self, transaction_id: str) -> None:
        self.transaction_id = transaction_id
        self._move(PipelineState.SUCCEEDED)

    def mark_failed(self, error: BaseException) -> None:
        self.error = error
        self._move(PipelineState.FAILED)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "attempt_id": self.attempt_id,
            "state": self.state.value,
            "sender": self.sender,
            "recipient": self.recipient,
            "lamports": self.lamports,
            "blockhash": self.blockhash,
            "transaction_id": self.transaction_id,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "history": [s.value for s in self.history],
            "created_at": self.created_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }

    def __repr__(self) -> str:
        return f"TransferAttempt(id={self.attempt_id[:8]}..., state={self.state.value})"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a finished attempt: a transaction id or a failure cause."""
    attempt_id: str
    state: PipelineState
    transaction_id: Optional[str] = None
    cause: Optional[TransferError] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.SUCCEEDED

    @property
    def error_message(self) -> Optional[str]:
        return self.cause.reason if self.cause else None

    @classmethod
    def from_attempt(cls, attempt: TransferAttempt) -> "SubmissionResult":
        if not attempt.is_terminal:
            raise ValueError(f"Attempt {attempt.attempt_id} has not finished")
        cause = attempt.error if isinstance(attempt.error, TransferError) else None
        return cls(
            attempt_id=attempt.attempt_id,
            state=attempt.state,
            transaction_id=attempt.transaction_id,
            cause=cause,
        )
