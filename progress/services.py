# progress/services.py
from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Dict, List, Optional

from django.conf import settings
from django.utils import timezone

from .exceptions import InvalidIdentity, InvalidInput, InvalidUpdate, ValidationFailure
from .models import IdentityKey, ProgressRecord
from .persistence import JsonDocument

LOGGER = logging.getLogger(__name__)

LEMMA_FILENAME = "known-lemmas.json"
WORD_PROGRESS_FILENAME = "word-knowledge.json"

FLAG_NAMES = ("known", "bookmarked")


def _validate_flag_updates(updates) -> Dict[str, bool]:
    """Accept only known/bookmarked with real booleans."""
    if not isinstance(updates, Mapping):
        raise InvalidUpdate("updates must be an object.")
    unknown = sorted(k for k in updates if k not in FLAG_NAMES)
    if unknown:
        raise InvalidUpdate(f"unrecognized flag(s): {', '.join(map(str, unknown))}")
    for name, value in updates.items():
        if not isinstance(value, bool):
            raise InvalidUpdate(f"{name} must be a boolean.")
    return dict(updates)


def _validate_display_text(name: str, value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name} must be a non-empty string.")
    return value


class LemmaKnowledgeSet:
    """Known-lemma vocabulary; every write replaces the whole set."""

    def __init__(self, document: JsonDocument) -> None:
        self._document = document
        self._lock = threading.Lock()
        self._words: List[str] = []
        self.reload()

    def reload(self) -> None:
        """Re-read the document from disk, replacing the in-memory state."""
        data = self._document.load()
        if not isinstance(data, list):
            LOGGER.warning("%s is not a list, starting empty", self._document.path)
            data = []
        words = [w for w in data if isinstance(w, str)]
        if len(words) != len(data):
            LOGGER.warning("Dropped %d non-string lemma(s) from %s",
                           len(data) - len(words), self._document.path)
        with self._lock:
            self._words = list(dict.fromkeys(words))

    def words(self) -> List[str]:
        with self._lock:
            return list(self._words)

    def __contains__(self, lemma) -> bool:
        with self._lock:
            return lemma in self._words

    def __len__(self) -> int:
        with self._lock:
            return len(self._words)

    def replace_all(self, lemmas) -> int:
        """
        Replace the whole set with ``lemmas`` and persist it.

        Duplicates collapse, keeping the first occurrence's position.
        Returns the resulting size.
        """
        # a bare str is a sequence too; reject it along with mappings/sets
        if not isinstance(lemmas, (list, tuple)):
            raise InvalidInput("words must be a list of strings.")
        if not all(isinstance(w, str) for w in lemmas):
            raise InvalidInput("words must be a list of strings.")

        with self._lock:
            self._words = list(dict.fromkeys(lemmas))
            self._document.save(self._words)
            count = len(self._words)
        LOGGER.info("Saved %d known lemma(s)", count)
        return count


class WordProgressStore:
    """
    Progress records keyed by IdentityKey.

    Every mutating call runs read-modify-write-persist under one lock, so two
    writers never interleave between the in-memory update and the save.
    """

    def __init__(
        self,
        document: JsonDocument,
        clock: Callable[[], dt.datetime] = timezone.now,
    ) -> None:
        self._document = document
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[IdentityKey, ProgressRecord] = {}
        self.reload()

    # ---- loading -------------------------------------------------------

    def reload(self) -> None:
        """Re-read the document from disk, replacing the in-memory state."""
        data = self._document.load()
        records: Dict[IdentityKey, ProgressRecord] = {}

        if isinstance(data, dict) and isinstance(data.get("words"), list):
            items = [(None, entry) for entry in data["words"]]
        elif isinstance(data, dict) and "words" not in data:
            # legacy map form: {"2:255:3": {"known": true}}
            items = list(data.items())
        else:
            LOGGER.warning("%s has an unexpected shape, starting empty", self._document.path)
            items = []

        for key, entry in items:
            try:
                identity = IdentityKey.parse(key) if key is not None else None
                record = ProgressRecord.from_dict(entry, identity=identity)
            except ValidationFailure as e:
                LOGGER.warning("Skipping invalid record in %s: %s", self._document.path, e)
                continue
            if not record.has_flags and record.screenshot_count == 0:
                continue
            if record.identity in records:
                LOGGER.warning("Duplicate record for %s in %s, keeping the first",
                               record.identity, self._document.path)
                continue
            records[record.identity] = record

        with self._lock:
            self._records = records

    def _save(self) -> None:
        self._document.save({"words": [r.to_dict() for r in self._records.values()]})
        LOGGER.debug("Saved %d word progress record(s)", len(self._records))

    # ---- reads ---------------------------------------------------------

    def get(self, identity: IdentityKey) -> Optional[ProgressRecord]:
        with self._lock:
            record = self._records.get(identity)
            return dataclasses.replace(record) if record else None

    def entries(self) -> List[ProgressRecord]:
        with self._lock:
            return [dataclasses.replace(r) for r in self._records.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ---- writes --------------------------------------------------------

    def upsert_flags(self, identity: IdentityKey, flag_updates) -> Optional[ProgressRecord]:
        """
        Shallow-merge ``flag_updates`` into the record for ``identity``.

        Fields absent from ``flag_updates`` are left untouched. When both flags
        end up false the method returns None and the record is dropped, unless
        it carries screenshot history, which is never discarded.
        """
        if not isinstance(identity, IdentityKey):
            raise InvalidIdentity("identity must be an IdentityKey.")
        updates = _validate_flag_updates(flag_updates)

        with self._lock:
            record = self._records.get(identity) or ProgressRecord(identity=identity)
            for name, value in updates.items():
                setattr(record, name, value)

            if record.has_flags:
                self._records[identity] = record
                result = dataclasses.replace(record)
            else:
                if record.screenshot_count == 0:
                    self._records.pop(identity, None)
                result = None
            self._save()
        return result

    def record_screenshot(
        self,
        identity: IdentityKey,
        arabic: str,
        translation: str,
        root: Optional[str] = None,
    ) -> ProgressRecord:
        """
        Count one screenshot of ``identity``, creating the record on first use.

        Display text of an existing record keeps its first non-empty value. Each call
        increments; repeating a call is not a no-op.
        """
        if not isinstance(identity, IdentityKey):
            raise InvalidIdentity("identity must be an IdentityKey.")
        _validate_display_text("arabic", arabic)
        _validate_display_text("translation", translation)
        if root is not None and not isinstance(root, str):
            raise InvalidInput("root must be a string or null.")

        with self._lock:
            now = self._clock()
            record = self._records.get(identity)
            if record is None:
                record = ProgressRecord(
                    identity=identity,
                    arabic=arabic,
                    translation=translation,
                    root=root or None,
                    screenshot_count=1,
                    last_updated=now,
                )
                self._records[identity] = record
            else:
                record.screenshot_count += 1
                # display text created empty by a flag update is filled once
                if not record.arabic:
                    record.arabic = arabic
                if not record.translation:
                    record.translation = translation
                if record.root is None and root:
                    record.root = root
                # never move backwards if the wall clock does
                if record.last_updated is None or now > record.last_updated:
                    record.last_updated = now
            result = dataclasses.replace(record)
            self._save()
        return result


# ---- process-wide stores -----------------------------------------------

_registry_lock = threading.Lock()
_lemma_set: Optional[LemmaKnowledgeSet] = None
_word_progress: Optional[WordProgressStore] = None


def init_stores(directory: str | Path | None = None) -> tuple[LemmaKnowledgeSet, WordProgressStore]:
    """Load both stores from ``directory`` (default: settings.PROGRESSION_DIR)."""
    global _lemma_set, _word_progress
    directory = Path(directory if directory is not None else settings.PROGRESSION_DIR)
    with _registry_lock:
        _lemma_set = LemmaKnowledgeSet(JsonDocument(directory / LEMMA_FILENAME, default=list))
        _word_progress = WordProgressStore(
            JsonDocument(directory / WORD_PROGRESS_FILENAME, default=lambda: {"words": []})
        )
        LOGGER.info("Loaded %d lemma(s) and %d word record(s) from %s",
                    len(_lemma_set), len(_word_progress), directory)
        return _lemma_set, _word_progress


def get_lemma_set() -> LemmaKnowledgeSet:
    if _lemma_set is None:
        init_stores()
    return _lemma_set


def get_word_progress() -> WordProgressStore:
    if _word_progress is None:
        init_stores()
    return _word_progress
