"""Draft persistence: snapshot format and store implementations.

A draft is the form data plus the time it was saved, nothing else.
Validation errors, completed steps and the current step are transient
and never persisted. On disk a draft is a JSON object of exactly this
shape::

    {"formData": {"identification": {...}}, "lastSavedAt": "2024-05-01T10:00:00+00:00"}
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from atomicwrites import atomic_write  # type: ignore[import-untyped]

from offerwizard.exceptions import PersistenceError
from offerwizard.logging import get_logger

__all__ = [
    "DraftSnapshot",
    "DraftStore",
    "FileDraftStore",
    "MemoryDraftStore",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DraftSnapshot:
    """Persisted form data.

    Attributes:
        form_data: Section key -> section value bag.
        last_saved_at: When the draft was written, or None if never saved.
    """

    form_data: dict[str, Any] = field(default_factory=dict)
    last_saved_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk draft shape."""
        return {
            "formData": copy.deepcopy(self.form_data),
            "lastSavedAt": (
                self.last_saved_at.isoformat() if self.last_saved_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DraftSnapshot:
        """Deserialize from the on-disk draft shape.

        Raises:
            ValueError: If ``formData`` is not an object or ``lastSavedAt``
                is not an ISO-8601 timestamp.
        """
        form_data = data.get("formData") or {}
        if not isinstance(form_data, Mapping):
            raise ValueError("formData must be an object")
        saved_at = data.get("lastSavedAt")
        return cls(
            form_data=dict(form_data),
            last_saved_at=datetime.fromisoformat(saved_at) if saved_at else None,
        )


class DraftStore(Protocol):
    """Protocol for draft persistence.

    Implementations raise ``PersistenceError`` on failure; the form data
    store turns that into a reported result.
    """

    async def save(self, snapshot: DraftSnapshot) -> None:
        """Persist a draft, replacing any previous one."""
        ...

    async def load(self) -> DraftSnapshot | None:
        """Load the saved draft, or None when there is none."""
        ...

    async def clear(self) -> None:
        """Remove the saved draft."""
        ...


class FileDraftStore:
    """JSON file draft store with atomic writes.

    Note: Uses synchronous file I/O. Drafts are small and local, so the
    write completes well within one event loop tick.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def save(self, snapshot: DraftSnapshot) -> None:
        try:
            content = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_write(
                str(self.path), mode="w", encoding="utf-8", overwrite=True
            ) as f:
                f.write(content)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(
                f"Failed to write draft: {e}", path=self.path
            ) from e
        logger.debug("draft_written", path=str(self.path))

    async def load(self) -> DraftSnapshot | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceError(
                f"Failed to read draft: {e}", path=self.path
            ) from e
        if not isinstance(data, Mapping):
            raise PersistenceError("Draft file must contain a JSON object", path=self.path)
        try:
            return DraftSnapshot.from_dict(data)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed draft: {e}", path=self.path) from e

    async def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(
                f"Failed to remove draft: {e}", path=self.path
            ) from e


class MemoryDraftStore:
    """In-memory draft store for testing and embedding.

    Not suitable for production - data lost on process exit.

    Args:
        snapshot: Initial saved draft, if any.
        fail_with: When set, every save raises ``PersistenceError`` with
            this message. Lets callers exercise failure handling.
    """

    def __init__(
        self,
        snapshot: DraftSnapshot | None = None,
        *,
        fail_with: str | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.fail_with = fail_with
        self.saves = 0

    async def save(self, snapshot: DraftSnapshot) -> None:
        if self.fail_with is not None:
            raise PersistenceError(self.fail_with)
        self.snapshot = DraftSnapshot(
            form_data=copy.deepcopy(snapshot.form_data),
            last_saved_at=snapshot.last_saved_at,
        )
        self.saves += 1

    async def load(self) -> DraftSnapshot | None:
        if self.snapshot is None:
            return None
        return DraftSnapshot(
            form_data=copy.deepcopy(self.snapshot.form_data),
            last_saved_at=self.snapshot.last_saved_at,
        )

    async def clear(self) -> None:
        self.snapshot = None
