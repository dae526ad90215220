# progress/tests/test_models.py
import dataclasses
import datetime as dt

import pytest

from progress.exceptions import InvalidIdentity, InvalidInput
from progress.models import IdentityKey, ProgressRecord


def test_identity_equality_is_field_wise():
    assert IdentityKey(2, 255, 3, 3) == IdentityKey(2, 255, 3, 3)
    assert IdentityKey(2, 255, 3, 3) != IdentityKey(2, 255, 3, 4)
    assert len({IdentityKey(1, 1, 1, 1), IdentityKey(1, 1, 1, 1)}) == 1


@pytest.mark.parametrize("args", [
    (0, 1, 1, 1),
    (1, 0, 1, 1),
    (1, 1, 0, 0),
    (1, 1, 3, 2),
])
def test_identity_rejects_out_of_range(args):
    with pytest.raises(InvalidIdentity):
        IdentityKey(*args)


def test_identity_rejects_non_integers():
    with pytest.raises(InvalidIdentity):
        IdentityKey("2", 255, 3, 3)
    with pytest.raises(InvalidIdentity):
        IdentityKey(True, 1, 1, 1)
    with pytest.raises(InvalidIdentity):
        IdentityKey(None, 1, 1, 1)


def test_identity_is_immutable():
    key = IdentityKey(1, 1, 1, 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        key.surah = 2


def test_parse_single_word_and_range():
    assert IdentityKey.parse("2:255:3") == IdentityKey(2, 255, 3, 3)
    assert IdentityKey.parse("2:255:3-5") == IdentityKey(2, 255, 3, 5)
    # multi-digit indices are unambiguous
    assert IdentityKey.parse("114:6:12") == IdentityKey(114, 6, 12, 12)


def test_format_is_inverse_of_parse():
    for text in ("1:1:1", "2:255:3-5", "18:10:11"):
        assert IdentityKey.parse(text).format() == text
    assert str(IdentityKey(3, 7, 2, 4)) == "3:7:2-4"


@pytest.mark.parametrize("text", ["", "2:255", "٢:٢٥٥:٣", "２:255:3", "2:255:x", "2::3", "2:255:5-3", "0:1:1", "a:b:c", None, 22553])
def test_parse_failures(text):
    with pytest.raises(InvalidIdentity):
        IdentityKey.parse(text)


def test_record_defaults():
    rec = ProgressRecord(identity=IdentityKey(1, 1, 1, 1))
    assert rec.known is False
    assert rec.bookmarked is False
    assert rec.screenshot_count == 0
    assert rec.last_updated is None
    assert rec.root is None
    assert rec.has_flags is False


def test_record_dict_writes_null_root_and_timestamp():
    rec = ProgressRecord(identity=IdentityKey(2, 255, 3, 4), arabic="الله لا", translation="Allah, no")
    data = rec.to_dict()
    assert data["root"] is None
    assert data["dateLastAdded"] is None
    assert data["startWordIndex"] == 3
    assert data["endWordIndex"] == 4
    assert data["numOfScreenshots"] == 0


def test_record_from_dict_restores_fields():
    when = dt.datetime(2025, 3, 1, 9, 30, tzinfo=dt.timezone.utc)
    rec = ProgressRecord(
        identity=IdentityKey(2, 255, 3, 3),
        arabic="الله",
        translation="Allah",
        root="أله",
        known=True,
        screenshot_count=4,
        last_updated=when,
    )
    back = ProgressRecord.from_dict(rec.to_dict())
    assert back == rec
    assert back.last_updated.tzinfo is not None


def test_record_from_dict_treats_naive_timestamp_as_utc():
    back = ProgressRecord.from_dict({
        "surah": 1, "ayah": 2, "startWordIndex": 1, "endWordIndex": 1,
        "numOfScreenshots": 1, "dateLastAdded": "2025-01-01T00:00:00",
    })
    assert back.last_updated == dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)


def test_record_from_dict_rejects_bad_count_and_date():
    base = {"surah": 1, "ayah": 1, "startWordIndex": 1, "endWordIndex": 1}
    with pytest.raises(InvalidInput):
        ProgressRecord.from_dict(dict(base, numOfScreenshots=-1))
    with pytest.raises(InvalidInput):
        ProgressRecord.from_dict(dict(base, dateLastAdded="yesterday"))
    with pytest.raises(InvalidIdentity):
        ProgressRecord.from_dict({"surah": 1})


def test_record_from_dict_requires_boolean_flags():
    base = {"surah": 1, "ayah": 1, "startWordIndex": 1, "endWordIndex": 1}
    with pytest.raises(InvalidInput):
        ProgressRecord.from_dict(dict(base, known="false"))
    with pytest.raises(InvalidInput):
        ProgressRecord.from_dict(dict(base, bookmarked=1))
    with pytest.raises(InvalidInput):
        ProgressRecord.from_dict(dict(base, dateLastAdded="2025-02-30T00:00:00Z"))
