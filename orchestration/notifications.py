# orchestration/notifications.py
"""User-visible notices raised by the enhancement flows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import structlog

from core.enhancement_gateway import EnhancementGatewayError, GatewayErrorKind

logger = structlog.get_logger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A message for the user; presentation is up to the caller."""

    title: str
    description: str
    level: NoticeLevel = NoticeLevel.INFO
    retryable: bool = False


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None: ...


class LoggingNotifier:
    """Default notifier that writes notices to the structured log."""

    def notify(self, notice: Notice) -> None:
        log = logger.warning if notice.level is NoticeLevel.ERROR else logger.info
        log(
            notice.title,
            description=notice.description,
            level=notice.level.value,
            retryable=notice.retryable,
        )


class RecordingNotifier:
    """Keeps every notice in order; handy for CLIs and tests."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notices]


_FAILURE_MESSAGES: dict[GatewayErrorKind, tuple[str, str]] = {
    GatewayErrorKind.NETWORK: (
        "Network Error",
        "Please check your internet connection and try again.",
    ),
    GatewayErrorKind.UNAVAILABLE: (
        "Service Temporarily Unavailable",
        "The enhancement service is currently unavailable. Please try again in a few moments.",
    ),
    GatewayErrorKind.RATE_LIMITED: (
        "Rate Limit Exceeded",
        "Too many enhancement requests. Please wait a moment before trying again.",
    ),
    GatewayErrorKind.UNAUTHORIZED: (
        "Authentication Error",
        "Please refresh the page and try again.",
    ),
}


def enhancement_failed_notice(error: BaseException) -> Notice:
    """Pick the retry notice for a failed enhancement request."""
    kind = (
        error.kind
        if isinstance(error, EnhancementGatewayError)
        else GatewayErrorKind.UNKNOWN
    )
    title, description = _FAILURE_MESSAGES.get(
        kind,
        ("Enhancement Failed", "Unable to enhance your letter. Please try again."),
    )
    return Notice(title, description, level=NoticeLevel.ERROR, retryable=True)
