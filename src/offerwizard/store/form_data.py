"""Form data store: the single writer of form data and validation errors.

Other components only ever see deep-copied snapshots. Every data change
bumps a revision counter, which lets a draft save that was in flight
during an edit leave the dirty flag set.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from offerwizard.events import (
    DraftSaved,
    DraftSaveFailed,
    EventBus,
    FormDataUpdated,
    ValidationErrorsChanged,
    WizardEvent,
    WizardReset,
)
from offerwizard.exceptions import PersistenceError
from offerwizard.logging import get_logger
from offerwizard.store.persistence import DraftSnapshot, DraftStore
from offerwizard.validation.models import ErrorMap

__all__ = ["FormDataStore", "DraftSaveResult", "Clock"]

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DraftSaveResult:
    """Outcome of a draft save.

    Attributes:
        success: Whether the draft was written.
        saved_at: Timestamp recorded in the draft on success.
        error: Failure description on failure.
    """

    success: bool
    saved_at: datetime | None = None
    error: str | None = None


class FormDataStore:
    """Section-keyed form data with dirty tracking and draft persistence.

    Args:
        persistence: Draft store used by ``save_draft``/``load_draft``.
            Without one, saving only clears the dirty flag.
        events: Optional bus receiving data, error and draft events.
        clock: Source of draft timestamps.

    Example:
        ```python
        store = FormDataStore(MemoryDraftStore())
        store.update("offerDetails", {"TIPO_MERCATO": "03"})
        store.update("offerDetails", {"TIPO_OFFERTA": "01"})
        store.section("offerDetails")  # both keys, shallow-merged
        result = await store.save_draft()
        ```
    """

    def __init__(
        self,
        persistence: DraftStore | None = None,
        *,
        events: EventBus | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.persistence = persistence
        self._events = events
        self._clock = clock or _utcnow
        self._form_data: dict[str, Any] = {}
        self._errors: ErrorMap = {}
        self._dirty = False
        self._last_saved_at: datetime | None = None
        self._revision = 0

    # ------------------------------------------------------------------
    # Form data
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the whole form data."""
        return copy.deepcopy(self._form_data)

    def section(self, name: str) -> Any:
        """Deep copy of one section, or None when it was never entered."""
        return copy.deepcopy(self._form_data.get(name))

    def has_section(self, name: str) -> bool:
        return name in self._form_data

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def last_saved_at(self) -> datetime | None:
        return self._last_saved_at

    @property
    def revision(self) -> int:
        """Counter bumped by every form data change."""
        return self._revision

    def update(self, section: str, data: Any) -> None:
        """Merge ``data`` into ``section``.

        Mappings are shallow-merged into an existing mapping section, so
        keys not present in ``data`` keep their values. Any other value
        (a list of discounts, for example) replaces the section.
        """
        existing = self._form_data.get(section)
        if isinstance(data, Mapping):
            merged = dict(existing) if isinstance(existing, Mapping) else {}
            merged.update(copy.deepcopy(dict(data)))
            self._form_data[section] = merged
            fields = tuple(data)
        else:
            self._form_data[section] = copy.deepcopy(data)
            fields = ()
        self._dirty = True
        self._revision += 1
        logger.debug("form_data_updated", section=section, fields=list(fields))
        self._publish(FormDataUpdated(section, fields))

    # ------------------------------------------------------------------
    # Validation errors
    # ------------------------------------------------------------------

    def validation_errors(
        self, section: str | None = None
    ) -> dict[str, Any]:
        """Copy of the error map, or of one section's field -> message map."""
        if section is None:
            return {name: dict(fields) for name, fields in self._errors.items()}
        return dict(self._errors.get(section, {}))

    def set_validation_errors(self, section: str, errors: Mapping[str, str]) -> None:
        """Replace one section's errors, leaving the others untouched."""
        self._errors[section] = dict(errors)
        self._publish(ValidationErrorsChanged(section))

    def replace_validation_errors(
        self, errors: Mapping[str, Mapping[str, str]]
    ) -> None:
        """Replace the whole error map."""
        self._errors = {name: dict(fields) for name, fields in errors.items()}
        self._publish(ValidationErrorsChanged(None))

    def clear_validation_errors(self, section: str | None = None) -> None:
        """Clear one section's errors, or all of them."""
        if section is None:
            self._errors.clear()
        else:
            self._errors.pop(section, None)
        self._publish(ValidationErrorsChanged(section))

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    async def save_draft(self) -> DraftSaveResult:
        """Persist form data and the save time.

        Never raises for persistence failures: they are logged, published
        as ``DraftSaveFailed`` and returned. The dirty flag is cleared only
        after a successful write, and only if no edit happened meanwhile.
        """
        saved_at = self._clock()
        revision = self._revision
        if self.persistence is not None:
            snapshot = DraftSnapshot(form_data=self.snapshot(), last_saved_at=saved_at)
            try:
                await self.persistence.save(snapshot)
            except PersistenceError as e:
                logger.warning("draft_save_failed", error=e.message, path=str(e.path))
                self._publish(DraftSaveFailed(e.message))
                return DraftSaveResult(success=False, error=e.message)
            except Exception as e:
                message = f"Draft store failed: {e}"
                logger.exception(
                    "draft_save_crashed", store=type(self.persistence).__name__
                )
                self._publish(DraftSaveFailed(message))
                return DraftSaveResult(success=False, error=message)

        self._last_saved_at = saved_at
        if self._revision == revision:
            self._dirty = False
        logger.info("draft_saved", saved_at=saved_at.isoformat())
        self._publish(DraftSaved(saved_at))
        return DraftSaveResult(success=True, saved_at=saved_at)

    async def load_draft(self) -> bool:
        """Replace form data with the persisted draft.

        Validation errors are cleared, since they described the previous
        data. Read failures are logged and leave the store unchanged.

        Returns:
            True if a draft was restored.
        """
        if self.persistence is None:
            return False
        try:
            snapshot = await self.persistence.load()
        except PersistenceError as e:
            logger.warning("draft_load_failed", error=e.message, path=str(e.path))
            return False
        except Exception:
            logger.exception(
                "draft_load_crashed", store=type(self.persistence).__name__
            )
            return False
        if snapshot is None:
            return False

        self._form_data = copy.deepcopy(snapshot.form_data)
        self._last_saved_at = snapshot.last_saved_at
        self._errors.clear()
        self._dirty = False
        self._revision += 1
        logger.info("draft_restored", sections=sorted(self._form_data))
        for section, value in self._form_data.items():
            fields = tuple(value) if isinstance(value, Mapping) else ()
            self._publish(FormDataUpdated(section, fields))
        self._publish(ValidationErrorsChanged(None))
        return True

    def reset(self) -> None:
        """Restore the empty initial state. Safe to call repeatedly.

        The persisted draft is left alone.
        """
        self._form_data = {}
        self._errors = {}
        self._dirty = False
        self._last_saved_at = None
        self._revision += 1
        self._publish(WizardReset())

    def _publish(self, event: WizardEvent) -> None:
        if self._events is not None:
            self._events.publish(event)
