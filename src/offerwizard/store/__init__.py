"""Form data store and draft persistence."""

from __future__ import annotations

from offerwizard.store.form_data import DraftSaveResult, FormDataStore
from offerwizard.store.persistence import (
    DraftSnapshot,
    DraftStore,
    FileDraftStore,
    MemoryDraftStore,
)

__all__ = [
    "FormDataStore",
    "DraftSaveResult",
    "DraftSnapshot",
    "DraftStore",
    "FileDraftStore",
    "MemoryDraftStore",
]
