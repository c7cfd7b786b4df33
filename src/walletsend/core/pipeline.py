"""
Submission pipeline.

Runs one transfer attempt through Build -> Sign -> Submit.
"""

from typing import Optional

import structlog

from walletsend.core.attempt import PipelineState, SubmissionResult, TransferAttempt
from walletsend.errors import TransferError
from walletsend.node.interface import NodeInterface
from walletsend.tx.builder import TransactionBuilder
from walletsend.tx.signer import ExternalSigner, attach_signature

logger = structlog.get_logger(__name__)


class PipelineReusedError(Exception):
    """Raised when a finished or running pipeline is asked to run again."""
    pass


class SubmissionPipeline:
    """
    Single-use orchestrator for one transfer attempt.

    Steps run strictly in order, each waiting for the previous result:

    1. build the unsigned transaction (fresh blockhash)
    2. request the fee payer's signature from the wallet
    3. attach the signature and serialize
    4. submit and record the transaction id

    Any TransferError ends the attempt in FAILED with the error kept as the
    cause. Other exceptions also fail the attempt and are re-raised.

    Usage:
        ```python
        pipeline = SubmissionPipeline(builder, signer, node)
        result = await pipeline.run(sender, recipient, 1_000_000, "Pay Bob")
        ```
    """

    def __init__(
        self,
        builder: TransactionBuilder,
        signer: ExternalSigner,
        node: NodeInterface,
    ):
        self.builder = builder
        self.signer = signer
        self.node = node
        self.attempt: Optional[TransferAttempt] = None

    @property
    def state(self) -> PipelineState:
        return self.attempt.state if self.attempt else PipelineState.IDLE

    async def run(
        self,
        sender: str,
        recipient: str,
        lamports: int,
        reason: str = "",
    ) -> SubmissionResult:
        """
        Run the attempt to completion.

        Args:
            sender: Fee payer address
            recipient: Destination address
            lamports: Amount in lamports
            reason: Reason shown by the wallet when signing

        Returns:
            SubmissionResult in SUCCEEDED or FAILED state

        Raises:
            PipelineReusedError: If this pipeline has already been run
        """
        if self.attempt is not None:
            raise PipelineReusedError(
                f"Pipeline already ran attempt {self.attempt.attempt_id}; start a new one"
            )

        attempt = TransferAttempt(
            sender=str(sender),
            recipient=str(recipient),
            lamports=lamports,
            reason=reason,
        )
        self.attempt = attempt
        log = logger.bind(attempt_id=attempt.attempt_id[:8])

        try:
            attempt.mark_building()
            unsigned = await self.builder.build(sender, recipient, lamports)

            attempt.mark_awaiting_signature(str(unsigned.recent_blockhash))
            log.info("pipeline_awaiting_signature", blockhash=attempt.blockhash)
            signature = await self.signer.request_signature(unsigned, reason)

            attempt.mark_submitting()
            signed = attach_signature(unsigned, signature)
            wire = signed.to_transaction()
            if bytes(wire.message) != unsigned.signable_message():
                raise RuntimeError("Serialized message differs from the signed message")

            transaction_id = await self.node.submit_transaction(bytes(wire))
            if transaction_id != signed.transaction_id:
                log.warning(
                    "transaction_id_mismatch",
                    expected=signed.transaction_id,
                    returned=transaction_id,
                )

            attempt.mark_succeeded(transaction_id)
            log.info("pipeline_succeeded", transaction_id=transaction_id)

        except TransferError as e:
            attempt.mark_failed(e)
            log.warning(
                "pipeline_failed",
                stage=attempt.history[-2].value,
                error_type=type(e).__name__,
                error=e.reason,
            )

        except Exception as e:
            if not attempt.is_terminal:
                attempt.mark_failed(e)
            log.error("pipeline_error", error=str(e))
            raise

        return SubmissionResult.from_attempt(attempt)
