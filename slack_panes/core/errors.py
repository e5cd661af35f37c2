"""Error taxonomy and user-facing reporting."""

from __future__ import annotations

from typing import Callable

from loguru import logger

Notifier = Callable[[str, str], None]


class PaneError(Exception):
    """Base class for failures raised inside the pane engine."""

    level = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchFailure(PaneError):
    """Network or service error; the operation is aborted."""

    def __init__(self, operation: str, detail: str = "") -> None:
        text = f"Failed to {operation}"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)
        self.operation = operation
        self.detail = detail


class MissingContext(PaneError):
    """Action needs a selected channel or thread but none is set."""

    level = "warning"


class InvalidPaneState(PaneError):
    """Action invoked against a closed pane."""

    level = "debug"


class UnresolvedEntity(PaneError):
    """Referenced user or channel is not cached yet."""

    level = "debug"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} is not cached")
        self.entity = entity
        self.entity_id = entity_id


def log_notifier(message: str, level: str) -> None:
    """Default notifier used when no host surface is attached."""
    logger.log(level.upper(), message)


def report_error(error: PaneError, notify: Notifier) -> None:
    """Surface *error* according to its kind.

    Fetch failures and missing context become short notifications;
    pane-state and resolution errors are only logged.
    """
    if isinstance(error, (InvalidPaneState, UnresolvedEntity)):
        logger.debug("Ignored {}: {}", type(error).__name__, error.message)
        return
    if isinstance(error, FetchFailure):
        logger.warning("{}", error.message)
    else:
        logger.info("{}", error.message)
    notify(error.message, error.level)


def as_failure(payload: object, operation: str) -> FetchFailure:
    """Normalize the payload of a failed callback."""
    if isinstance(payload, FetchFailure):
        return payload
    return FetchFailure(operation, str(payload) if payload else "")
