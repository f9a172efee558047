"""Remote generation backend over an external chat-completions endpoint."""

import asyncio
import math
import time
from datetime import datetime
from typing import Any

import httpx

from agentchat.config import Settings
from agentchat.domain.entities.agent import BACKEND_ACTOR
from agentchat.domain.entities.conversation import RagContext
from agentchat.domain.entities.protocol import (
    PACKED_KINDS,
    STEP_KINDS,
    EvidenceItem,
    ModelCallInfo,
    PackedItem,
    ProtocolActor,
    ProtocolStep,
    RetrievalBatch,
    StepPayload,
    TokenUsage,
    new_id,
    utcnow,
)
from agentchat.domain.errors import (
    ProviderInvalidRequestError,
    ProviderInvalidResponseError,
    ProviderNotConfiguredError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from agentchat.domain.protocols.backends import (
    BackendKind,
    GenerationBackend,
    GenerationRequest,
    GenerationResult,
)
from agentchat.infrastructure.telemetry.logging import get_logger
from agentchat.infrastructure.telemetry.metrics import record_backend_request

logger = get_logger(__name__)

PROVIDER = "remote"

# Roles the chat-completions endpoint understands.
_ROLE_MAP = {"agent": "assistant", "user": "user", "system": "system", "assistant": "assistant"}


def compose_url(base: str, path: str) -> str:
    """Join base URL and path with exactly one slash between them."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def coerce_number(value: Any) -> int | float | None:
    """Coerce a loosely-typed numeric; non-finite or non-numeric values become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _dict_or_empty(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _parse_time(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utcnow()


def normalize_params(raw: Any) -> dict[str, float]:
    params: dict[str, float] = {}
    for key, value in _dict_or_empty(raw).items():
        number = coerce_number(value)
        if number is not None:
            params[str(key)] = number
    return params


def normalize_tokens(raw: Any) -> TokenUsage | None:
    if not isinstance(raw, dict):
        return None
    usage = TokenUsage(
        prompt=coerce_number(raw.get("prompt")),
        completion=coerce_number(raw.get("completion")),
        total=coerce_number(raw.get("total")),
    )
    return None if usage.is_empty() else usage


def normalize_model_info(raw: Any) -> ModelCallInfo | None:
    if not isinstance(raw, dict):
        return None
    return ModelCallInfo(
        model=str(raw.get("model") or "unknown"),
        params=normalize_params(raw.get("params")),
        tokens=normalize_tokens(raw.get("tokens")),
        latency_ms=coerce_number(raw.get("latencyMs", raw.get("latency_ms"))),
    )


def normalize_evidence(raw: Any) -> EvidenceItem | None:
    if not isinstance(raw, dict):
        return None
    return EvidenceItem(
        id=_str_or_none(raw.get("id")) or new_id(),
        source=str(raw.get("source") or ""),
        title=_str_or_none(raw.get("title")),
        snippet=str(raw.get("snippet") or ""),
        score=coerce_number(raw.get("score")),
        url=_str_or_none(raw.get("url")),
        metadata=_dict_or_empty(raw.get("metadata")),
    )


def _evidence_list(raw: Any) -> tuple[EvidenceItem, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(item for item in map(normalize_evidence, raw) if item is not None)


def normalize_context(raw: Any) -> RagContext | None:
    if not isinstance(raw, dict):
        return None
    return RagContext(
        query=str(raw.get("query") or ""),
        chunks=_evidence_list(raw.get("chunks")),
        used_at=_parse_time(raw.get("usedAt")),
    )


def _payload(raw: Any) -> StepPayload | None:
    if not isinstance(raw, dict):
        return None
    return StepPayload(text=_str_or_none(raw.get("text")), fields=_dict_or_empty(raw.get("fields")))


def _actor(raw: Any) -> ProtocolActor:
    if not isinstance(raw, dict) or not raw.get("id"):
        return BACKEND_ACTOR
    return ProtocolActor(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        icon=_str_or_none(raw.get("icon")),
    )


def _known(value: Any, allowed: tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _packed_item(raw: Any) -> PackedItem | None:
    if not isinstance(raw, dict):
        return None
    tokens = coerce_number(raw.get("tokens"))
    return PackedItem(
        id=_str_or_none(raw.get("id")) or new_id(),
        kind=_known(raw.get("kind") or raw.get("type"), PACKED_KINDS, "retrieval"),
        text=str(raw.get("text") or ""),
        tokens=int(tokens) if tokens is not None else None,
        origin=_str_or_none(raw.get("origin")),
    )


def normalize_step(raw: Any) -> ProtocolStep | None:
    """Backend step as a ProtocolStep; missing id/timestamp are generated.

    Kinds outside the protocol vocabulary become ``tool``; the backend's
    own label is kept in ``output.fields["backendKind"]``.
    """
    if not isinstance(raw, dict):
        return None

    raw_kind = raw.get("kind") or raw.get("type")
    kind = _known(raw_kind, STEP_KINDS, "tool")
    output = _payload(raw.get("output"))
    if raw_kind is not None and kind != raw_kind:
        output = StepPayload(
            text=output.text if output else None,
            fields={**(output.fields if output else {}), "backendKind": str(raw_kind)},
        )

    retrieval = None
    if isinstance(raw.get("retrieval"), dict):
        retrieval = RetrievalBatch(
            query=str(raw["retrieval"].get("query") or ""),
            items=_evidence_list(raw["retrieval"].get("items")),
        )

    context_window = None
    if isinstance(raw.get("contextWindow"), list):
        context_window = tuple(
            item for item in map(_packed_item, raw["contextWindow"]) if item is not None
        )

    return ProtocolStep(
        id=_str_or_none(raw.get("id")) or new_id(),
        at=_parse_time(raw.get("at")) if raw.get("at") else utcnow(),
        kind=kind,
        actor=_actor(raw.get("actor")),
        input=_payload(raw.get("input")),
        output=output,
        retrieval=retrieval,
        context_window=context_window,
        model=normalize_model_info(raw.get("model")),
        note=_str_or_none(raw.get("note")),
    )


def normalize_response(body: dict[str, Any]) -> GenerationResult:
    """Build a GenerationResult from a loosely-typed response body.

    Accepts both ``modelCallInfo``/``protocolSteps`` and the shorter
    ``llm``/``protocol`` keys.
    """
    content = body.get("content")
    raw_steps = body.get("protocolSteps", body.get("protocol"))
    steps = raw_steps if isinstance(raw_steps, list) else []

    return GenerationResult(
        content=content if isinstance(content, str) else "",
        context=normalize_context(body.get("context")),
        model_call_info=normalize_model_info(body.get("modelCallInfo", body.get("llm"))),
        protocol_steps=tuple(step for step in map(normalize_step, steps) if step is not None),
    )


class RemoteBackend:
    """Delegates generation to an external chat-completions endpoint.

    Configured only when a base URL is present. One request per call, bounded
    by ``timeout_ms``; every failure surfaces as a ProviderError subclass.
    """

    kind: BackendKind = "remote"

    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        path: str = "/v1/chat/completions",
        timeout_ms: int = 20000,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.strip()
        self.api_key = api_key
        self.path = path
        self.timeout_ms = timeout_ms
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteBackend":
        return cls(
            base_url=settings.llm_api_url,
            api_key=settings.llm_api_key,
            path=settings.llm_chat_completions_path,
            timeout_ms=settings.llm_timeout_ms,
        )

    @property
    def name(self) -> str:
        return PROVIDER

    @property
    def url(self) -> str:
        return compose_url(self.base_url, self.path)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.headers,
                timeout=self.timeout_seconds,
            )
        return self._client

    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Send one chat-completions request and normalize the reply."""
        if not self.is_configured():
            raise ProviderNotConfiguredError(provider=PROVIDER, operation="generate")

        payload = request.to_payload()
        payload["messages"] = [
            {"role": _ROLE_MAP.get(m["role"], m["role"]), "content": m["content"]}
            for m in payload["messages"]
        ]

        logger.debug(
            "Calling remote backend",
            extra={
                "url": self.url,
                "agent_id": request.agent_id,
                "message_count": len(payload["messages"]),
            },
        )

        start = time.perf_counter()
        status = "error"
        try:
            response = await asyncio.wait_for(
                self.client.post(self.url, json=payload, headers=self.headers),
                timeout=self.timeout_seconds,
            )
            result = self._parse(response)
            status = "success"
            return result

        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            status = "timeout"
            raise ProviderTimeoutError(
                message=f"Remote backend timed out after {self.timeout_ms}ms",
                provider=PROVIDER,
                operation="generate",
                details={"timeout_ms": self.timeout_ms},
            ) from e

        except httpx.HTTPError as e:
            raise ProviderUnavailableError(
                message=f"Remote backend unreachable: {e}",
                provider=PROVIDER,
                operation="generate",
                details={"error_type": type(e).__name__},
            ) from e

        finally:
            record_backend_request(PROVIDER, status, time.perf_counter() - start)

    def _parse(self, response: httpx.Response) -> GenerationResult:
        if response.status_code == 429:
            raise ProviderRateLimitError(
                message="Remote backend rate limit exceeded",
                provider=PROVIDER,
                operation="generate",
                details={"status_code": 429},
            )

        if response.status_code >= 500:
            raise ProviderUnavailableError(
                message=f"Remote backend error: {response.status_code}",
                provider=PROVIDER,
                operation="generate",
                details={"status_code": response.status_code},
            )

        if response.status_code >= 400:
            raise ProviderInvalidRequestError(
                message=f"Remote backend rejected the request: {response.status_code}",
                provider=PROVIDER,
                operation="generate",
                details={"status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderInvalidResponseError(
                message="Remote backend returned a non-JSON body",
                provider=PROVIDER,
                operation="generate",
            ) from e

        if not isinstance(body, dict):
            raise ProviderInvalidResponseError(
                message="Remote backend returned a non-object body",
                provider=PROVIDER,
                operation="generate",
                details={"body_type": type(body).__name__},
            )

        return normalize_response(body)


# Protocol compliance
_: type[GenerationBackend] = RemoteBackend  # type: ignore
