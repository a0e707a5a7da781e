"""Wizard change events and the observer bus that delivers them.

Events are frozen dataclasses published after a state change has been
applied. Listeners receive them synchronously, in subscription order.
A listener that raises is logged and skipped; it cannot undo the change
or prevent delivery to other listeners.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from offerwizard.logging import get_logger

__all__ = [
    "FormDataUpdated",
    "ValidationErrorsChanged",
    "StepChanged",
    "StepCompletionChanged",
    "DraftSaved",
    "DraftSaveFailed",
    "WizardReset",
    "WizardEvent",
    "EventListener",
    "EventBus",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FormDataUpdated:
    """A section of the form data was merged with new values.

    Attributes:
        section: Section key that changed.
        fields: Keys supplied by the update (empty when the whole section
            value was replaced by a non-mapping value).
    """

    section: str
    fields: tuple[str, ...]
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class ValidationErrorsChanged:
    """The validation error map changed.

    Attributes:
        section: Section whose errors changed, or None when the whole map
            was replaced or cleared.
    """

    section: str | None
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class StepChanged:
    """The current step moved.

    Attributes:
        previous: Step id before the move.
        current: Step id after the move.
        reason: One of "advance", "retreat", "jump", "redirect", "reset".
    """

    previous: str
    current: str
    reason: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class StepCompletionChanged:
    """A step was added to or removed from the completed set."""

    step_id: str
    completed: bool
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class DraftSaved:
    saved_at: datetime
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class DraftSaveFailed:
    error: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class WizardReset:
    timestamp: float = field(default_factory=time.time)


WizardEvent = (
    FormDataUpdated
    | ValidationErrorsChanged
    | StepChanged
    | StepCompletionChanged
    | DraftSaved
    | DraftSaveFailed
    | WizardReset
)

EventListener = Callable[[WizardEvent], None]


class EventBus:
    """Explicit publish/subscribe channel for wizard events.

    Example:
        ```python
        bus = EventBus()
        unsubscribe = bus.subscribe(lambda event: print(event))
        bus.publish(WizardReset())
        unsubscribe()
        ```
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener; calling it twice is a no-op.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: WizardEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "event_listener_failed", event=type(event).__name__
                )

    def __len__(self) -> int:
        return len(self._listeners)
