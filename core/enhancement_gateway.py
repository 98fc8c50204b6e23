# core/enhancement_gateway.py
"""
Boundary to the remote AI enhancement service.

The orchestrator only depends on the ``EnhancementGateway`` protocol.
``HttpEnhancementGateway`` talks to the hosted backend's serverless
functions over HTTP and turns every failure into an
``EnhancementGatewayError`` carrying a coarse error kind, which callers use
to pick a user-facing message.
"""

from __future__ import annotations

import asyncio
import json
import random
from datetime import date
from enum import Enum
from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from config import settings
from models.letter_models import (
    EnhancementField,
    EnhancementResult,
    FieldSuggestion,
    InferredMilestone,
    LetterDraft,
)

logger = structlog.get_logger(__name__)


class GatewayErrorKind(str, Enum):
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    UNAVAILABLE = "unavailable"
    INVALID_RESPONSE = "invalid_response"
    UNKNOWN = "unknown"


class EnhancementGatewayError(RuntimeError):
    """Raised when the enhancement service cannot produce a usable result."""

    def __init__(
        self,
        message: str,
        kind: GatewayErrorKind = GatewayErrorKind.UNKNOWN,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class EnhancementGateway(Protocol):
    """Capability the enhancement session consumes."""

    async def enhance(
        self, title: str, goal: str, content: str, send_date: date | None
    ) -> EnhancementResult: ...


def _kind_for_status(status_code: int) -> GatewayErrorKind:
    if status_code == 429:
        return GatewayErrorKind.RATE_LIMITED
    if status_code in (401, 403):
        return GatewayErrorKind.UNAUTHORIZED
    if status_code >= 500:
        return GatewayErrorKind.UNAVAILABLE
    return GatewayErrorKind.UNKNOWN


def _is_retryable(error: EnhancementGatewayError) -> bool:
    return error.kind in (GatewayErrorKind.NETWORK, GatewayErrorKind.UNAVAILABLE)


class HttpEnhancementGateway:
    """Invoke the backend's enhancement functions with httpx."""

    def __init__(
        self,
        base_url: str = settings.SUPABASE_URL,
        api_key: str = settings.SUPABASE_ANON_KEY,
        client: httpx.AsyncClient | None = None,
        timeout: float = settings.HTTPX_TIMEOUT,
        retry_attempts: int = settings.ENHANCEMENT_RETRY_ATTEMPTS,
        retry_delay: float = settings.ENHANCEMENT_RETRY_DELAY_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.request_count = 0

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    def _function_url(self, function_name: str) -> str:
        return f"{self.base_url}/functions/v1/{function_name}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def _backoff_delay(self, attempt: int) -> None:
        """Sleep for an exponentially increasing delay with jitter."""
        delay = self.retry_delay * (2**attempt)
        jitter = random.uniform(0, delay / 2)
        await asyncio.sleep(delay + jitter)

    async def _post_once(
        self, function_name: str, body: dict[str, Any] | None
    ) -> Any:
        self.request_count += 1
        try:
            response = await self._client.post(
                self._function_url(function_name), json=body, headers=self._headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e_status:
            status_code = e_status.response.status_code
            raise EnhancementGatewayError(
                f"Function '{function_name}' returned HTTP {status_code}: "
                f"{e_status.response.text[:200]}",
                kind=_kind_for_status(status_code),
                status_code=status_code,
            ) from e_status
        except httpx.RequestError as e_req:
            raise EnhancementGatewayError(
                f"Network error calling '{function_name}': {e_req}",
                kind=GatewayErrorKind.NETWORK,
            ) from e_req
        except json.JSONDecodeError as e_json:
            raise EnhancementGatewayError(
                f"Function '{function_name}' returned a non-JSON body: {e_json}",
                kind=GatewayErrorKind.INVALID_RESPONSE,
            ) from e_json

    async def _invoke(
        self, function_name: str, body: dict[str, Any] | None = None
    ) -> Any:
        """POST to a function, retrying transient failures."""
        for attempt in range(self.retry_attempts):
            try:
                return await self._post_once(function_name, body)
            except EnhancementGatewayError as exc:
                if not _is_retryable(exc) or attempt == self.retry_attempts - 1:
                    logger.warning(
                        "Enhancement function call failed",
                        function=function_name,
                        attempt=attempt + 1,
                        kind=exc.kind.value,
                        error=str(exc),
                    )
                    raise
                logger.info(
                    "Retrying enhancement function call",
                    function=function_name,
                    attempt=attempt + 1,
                    kind=exc.kind.value,
                )
                await self._backoff_delay(attempt)
        raise AssertionError("unreachable")  # pragma: no cover

    async def enhance(
        self, title: str, goal: str, content: str, send_date: date | None
    ) -> EnhancementResult:
        body = LetterDraft(
            title=title, goal=goal, content=content, send_date=send_date
        ).request_payload()
        logger.debug(
            "Requesting letter enhancement",
            title_length=len(title),
            goal_length=len(goal),
            content_length=len(content),
            send_date=body["send_date"],
        )
        data = await self._invoke(settings.ENHANCE_LETTER_FUNCTION, body)
        if (
            not isinstance(data, dict)
            or "enhancedLetter" not in data
            or "suggestedMilestones" not in data
        ):
            raise EnhancementGatewayError(
                "Invalid response format", kind=GatewayErrorKind.INVALID_RESPONSE
            )
        try:
            result = EnhancementResult.model_validate(data)
        except ValidationError as e_val:
            raise EnhancementGatewayError(
                f"Invalid response format: {e_val.error_count()} validation errors",
                kind=GatewayErrorKind.INVALID_RESPONSE,
            ) from e_val
        logger.info(
            "Letter enhancement received",
            milestone_count=len(result.suggested_milestones),
        )
        return result

    @staticmethod
    def _unwrap(data: Any) -> Any:
        # enhance-field and infer-milestones wrap their payload in {"data": ...}
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            return data["data"]
        return data

    async def enhance_field(
        self,
        field: EnhancementField,
        original_content: str,
        context: dict[str, str] | None = None,
    ) -> FieldSuggestion:
        field = EnhancementField(field)
        body = {
            "field": field.value,
            "originalContent": original_content,
            "context": context or {},
        }
        data = self._unwrap(await self._invoke(settings.ENHANCE_FIELD_FUNCTION, body))
        if not isinstance(data, dict) or not isinstance(data.get("suggestion"), str):
            raise EnhancementGatewayError(
                "Invalid response format", kind=GatewayErrorKind.INVALID_RESPONSE
            )
        return FieldSuggestion(
            field=field,
            suggestion=data["suggestion"],
            explanation=str(data.get("explanation") or ""),
        )

    async def infer_milestones(
        self, goal: str, content: str, title: str | None = None
    ) -> list[InferredMilestone]:
        body: dict[str, Any] = {"goal": goal, "content": content}
        if title:
            body["title"] = title
        data = self._unwrap(
            await self._invoke(settings.INFER_MILESTONES_FUNCTION, body)
        )
        raw = data.get("suggestedMilestones") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise EnhancementGatewayError(
                "Invalid response format", kind=GatewayErrorKind.INVALID_RESPONSE
            )
        try:
            return [InferredMilestone.model_validate(item) for item in raw]
        except ValidationError as e_val:
            raise EnhancementGatewayError(
                f"Invalid response format: {e_val.error_count()} validation errors",
                kind=GatewayErrorKind.INVALID_RESPONSE,
            ) from e_val

    async def is_available(self) -> bool:
        """Ask the backend whether enhancement is currently offered."""
        try:
            data = await self._invoke(settings.ENHANCEMENT_STATUS_FUNCTION)
        except EnhancementGatewayError as exc:
            logger.warning(
                "Could not check enhancement availability", error=str(exc)
            )
            return False
        return bool(isinstance(data, dict) and data.get("available"))
