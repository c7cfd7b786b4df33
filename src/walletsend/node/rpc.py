"""
Solana JSON-RPC adapter for node integration.

Provides blockchain access over HTTP JSON-RPC 2.0.
"""

import base64
import itertools
from typing import Any, List, Optional, Union

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from solders.hash import Hash

from walletsend.config import WalletSendConfig, get_config
from walletsend.errors import MalformedResponse, NetworkUnavailable, RpcRejected
from walletsend.node.interface import BlockReference, NodeInterface

logger = structlog.get_logger(__name__)


class RpcErrorObject(BaseModel):
    code: int
    message: str
    data: Any = None


class RpcEnvelope(BaseModel):
    """JSON-RPC 2.0 response envelope."""
    jsonrpc: str = "2.0"
    id: Optional[Union[int, str]] = None
    result: Any = None
    error: Optional[RpcErrorObject] = None


class LatestBlockhashContext(BaseModel):
    slot: int


class LatestBlockhashValue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    blockhash: str
    last_valid_block_height: Optional[int] = Field(default=None, alias="lastValidBlockHeight")


class LatestBlockhashResult(BaseModel):
    context: Optional[LatestBlockhashContext] = None
    value: LatestBlockhashValue


class SolanaRpcAdapter(NodeInterface):
    """
    Solana JSON-RPC adapter.

    Implements the NodeInterface against a single JSON-RPC endpoint.
    """

    def __init__(
        self,
        config: Optional[WalletSendConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the RPC adapter.

        Args:
            config: walletsend configuration. Uses global config if not provided.
            transport: Optional httpx transport (used to stub the endpoint in tests)
        """
        self.config = config or get_config()
        self.endpoint_url = self.config.endpoint_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._request_ids = itertools.count(1)

    async def connect(self) -> None:
        """Establish connection (create HTTP client)."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            timeout=self.config.request_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )
        logger.info("rpc_connected", endpoint=self.endpoint_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("rpc_disconnected")

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC call and return its ``result`` member."""
        if not self._client:
            await self.connect()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
        }
        if params:
            payload["params"] = params

        try:
            response = await self._client.post(self.endpoint_url, json=payload)
        except httpx.HTTPError as e:
            logger.error("rpc_request_error", method=method, error=str(e))
            raise NetworkUnavailable(f"RPC request {method} failed: {e}") from e

        # Non-2xx is a transport failure unless the body is a JSON-RPC error
        status_ok = response.is_success

        try:
            envelope = RpcEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            if not status_ok:
                raise self._unavailable(method, response) from e
            logger.error("rpc_response_malformed", method=method, status=response.status_code)
            raise MalformedResponse(f"Malformed {method} response: {e}") from e

        if envelope.error is None and not status_ok:
            raise self._unavailable(method, response)

        if envelope.error is not None:
            logger.warning(
                "rpc_request_rejected",
                method=method,
                code=envelope.error.code,
                error=envelope.error.message,
            )
            raise RpcRejected(envelope.error.message, envelope.error.code, envelope.error.data)

        if "result" not in envelope.model_fields_set:
            raise MalformedResponse(
                f"Malformed {method} response (HTTP {response.status_code}): {response.text}"
            )

        return envelope.result

    @staticmethod
    def _unavailable(method: str, response: httpx.Response) -> NetworkUnavailable:
        logger.error("rpc_request_failed", method=method, status=response.status_code)
        return NetworkUnavailable(
            f"RPC endpoint returned HTTP {response.status_code}: {response.text}"
        )

    async def fetch_block_reference(self) -> BlockReference:
        """Get the latest blockhash."""
        params = None
        if self.config.commitment:
            params = [{"commitment": self.config.commitment}]

        result = await self._request("getLatestBlockhash", params)

        try:
            parsed = LatestBlockhashResult.model_validate(result)
        except ValidationError as e:
            raise MalformedResponse(f"Malformed getLatestBlockhash result: {e}") from e

        try:
            blockhash = Hash.from_string(parsed.value.blockhash)
        except Exception as e:  # noqa: BLE001 - solders raises its own parse errors
            raise MalformedResponse(
                f"Invalid blockhash in getLatestBlockhash result: {parsed.value.blockhash!r}"
            ) from e

        reference = BlockReference(
            blockhash=blockhash,
            last_valid_block_height=parsed.value.last_valid_block_height,
            slot=parsed.context.slot if parsed.context else None,
        )
        logger.debug(
            "blockhash_fetched",
            blockhash=str(blockhash),
            last_valid_block_height=reference.last_valid_block_height,
        )
        return reference

    async def submit_transaction(self, signed_transaction: bytes) -> str:
        """Submit a signed transaction."""
        options = {
            "encoding": "base64",
            "skipPreflight": self.config.skip_preflight,
        }
        if self.config.preflight_commitment:
            options["preflightCommitment"] = self.config.preflight_commitment

        encoded = base64.b64encode(signed_transaction).decode("ascii")
        result = await self._request("sendTransaction", [encoded, options])

        if not isinstance(result, str) or not result:
            raise MalformedResponse(f"Malformed sendTransaction result: {result!r}")

        logger.info("transaction_submitted", transaction_id=result)
        return result
