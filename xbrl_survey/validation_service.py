"""
Arelle validation service client
================================
Hands a generated instance to an Arelle HTTP service that checks it against
the taxonomy's schema and XULE rules.

    POST {ARELLE_API_URL}/validate
    Content-Type: application/xml

    -> {"valid": false,
        "messages": [{"severity": "error", "message": "..."}]}

The package never calls the service itself; callers decide when to.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx

from .errors import ValidationServiceError

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ServiceMessage:
    severity: str
    message: str


@dataclass(frozen=True)
class ServiceResult:
    valid: bool
    messages: tuple = ()

    @property
    def errors(self) -> list[ServiceMessage]:
        return [m for m in self.messages if m.severity.lower() == "error"]


class ArelleClient:
    def __init__(self, base_url: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or os.environ.get("ARELLE_API_URL") or DEFAULT_URL).rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def validate(self, xml: str) -> ServiceResult:
        try:
            resp = self.client.post(
                "/validate",
                content=xml.encode("utf-8"),
                headers={"Content-Type": "application/xml"},
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise ValidationServiceError(f"Validation request failed: {e}") from e
        except ValueError as e:
            raise ValidationServiceError(f"Validation service returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or "valid" not in data:
            raise ValidationServiceError(f"Unexpected validation response: {data!r}")

        messages = tuple(
            ServiceMessage(
                severity=str(m.get("severity", "info")),
                message=str(m.get("message", "")),
            )
            for m in data.get("messages") or []
            if isinstance(m, dict)
        )
        result = ServiceResult(valid=bool(data["valid"]), messages=messages)
        logger.debug("Arelle returned valid=%s with %d messages",
                     result.valid, len(messages))
        return result

    def available(self) -> bool:
        """True if the service answers at all."""
        try:
            self.client.get("/docs")
        except httpx.HTTPError:
            return False
        return True

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ArelleClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
