# progress/models.py
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .exceptions import InvalidIdentity, InvalidInput

# "surah:ayah:index" or "surah:ayah:start-end"
_KEY_RE = re.compile(r"^([0-9]+):([0-9]+):([0-9]+)(?:-([0-9]+))?$")


def _to_aware_utc(value: str | dt.datetime | None) -> dt.datetime | None:
    """Parse an ISO string or datetime into a tz-aware datetime in UTC; allow None."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            d = parse_datetime(value)
        except ValueError:
            # well-formed but impossible, e.g. month 13
            d = None
        if d is None:
            raise InvalidInput("dateLastAdded must be ISO-8601")
    elif isinstance(value, dt.datetime):
        d = value
    else:
        raise InvalidInput("dateLastAdded must be str or datetime")
    if timezone.is_naive(d):
        d = timezone.make_aware(d, dt.timezone.utc)
    return d.astimezone(dt.timezone.utc)


def _flag(data: Dict, name: str) -> bool:
    value = data.get(name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidInput(f"{name} must be a boolean")
    return value


@dataclass(frozen=True)
class IdentityKey:
    """A word range inside one verse; all indices are 1-based and inclusive."""

    surah: int
    ayah: int
    start_word_index: int
    end_word_index: int

    def __post_init__(self) -> None:
        for name in ("surah", "ayah", "start_word_index", "end_word_index"):
            value = getattr(self, name)
            # bool is an int subclass; True must not pass as 1
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidIdentity(f"{name} must be an integer.")
        if self.surah < 1:
            raise InvalidIdentity("surah must be >= 1.")
        if self.ayah < 1:
            raise InvalidIdentity("ayah must be >= 1.")
        if self.start_word_index < 1:
            raise InvalidIdentity("startWordIndex must be >= 1.")
        if self.end_word_index < self.start_word_index:
            raise InvalidIdentity("endWordIndex must be >= startWordIndex.")

    @classmethod
    def parse(cls, text: str) -> "IdentityKey":
        """Parse the ``surah:ayah:index`` / ``surah:ayah:start-end`` form."""
        if not isinstance(text, str):
            raise InvalidIdentity("wordKey must be a string.")
        m = _KEY_RE.match(text.strip())
        if m is None:
            raise InvalidIdentity(f"invalid wordKey: {text!r}")
        surah, ayah, start, end = m.groups()
        start_i = int(start)
        return cls(int(surah), int(ayah), start_i, int(end) if end else start_i)

    def format(self) -> str:
        if self.start_word_index == self.end_word_index:
            return f"{self.surah}:{self.ayah}:{self.start_word_index}"
        return f"{self.surah}:{self.ayah}:{self.start_word_index}-{self.end_word_index}"

    def __str__(self) -> str:
        return self.format()

    @property
    def is_multi_word(self) -> bool:
        return self.end_word_index > self.start_word_index


@dataclass
class ProgressRecord:
    """
    Progress for one word occurrence.

    Flag fields (known/bookmarked) are driven by flag updates; screenshot_count
    and last_updated only by screenshot events. Display text is advisory and
    keeps the first non-empty value written to it.
    """

    identity: IdentityKey
    arabic: str = ""
    translation: str = ""
    root: Optional[str] = None
    known: bool = False
    bookmarked: bool = False
    screenshot_count: int = 0
    last_updated: Optional[dt.datetime] = field(default=None)

    @property
    def has_flags(self) -> bool:
        return self.known or self.bookmarked

    def to_dict(self) -> Dict:
        """Document/wire shape; root is written as null, never omitted."""
        return {
            "arabic": self.arabic,
            "translation": self.translation,
            "root": self.root,
            "surah": self.identity.surah,
            "ayah": self.identity.ayah,
            "startWordIndex": self.identity.start_word_index,
            "endWordIndex": self.identity.end_word_index,
            "known": self.known,
            "bookmarked": self.bookmarked,
            "numOfScreenshots": self.screenshot_count,
            "dateLastAdded": self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: Dict, identity: IdentityKey | None = None) -> "ProgressRecord":
        """Build a record from its document shape; ``identity`` overrides the embedded fields."""
        if not isinstance(data, dict):
            raise InvalidInput("record must be an object")
        if identity is None:
            identity = IdentityKey(
                data.get("surah"),
                data.get("ayah"),
                data.get("startWordIndex"),
                data.get("endWordIndex"),
            )
        count = data.get("numOfScreenshots", 0) or 0
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidInput("numOfScreenshots must be a non-negative integer")
        return cls(
            identity=identity,
            arabic=str(data.get("arabic") or ""),
            translation=str(data.get("translation") or ""),
            root=data.get("root") or None,
            known=_flag(data, "known"),
            bookmarked=_flag(data, "bookmarked"),
            screenshot_count=count,
            last_updated=_to_aware_utc(data.get("dateLastAdded")),
        )
