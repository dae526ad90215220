# progress/tests/conftest.py
import pytest

from progress.models import IdentityKey
from progress.persistence import JsonDocument
from progress.services import (
    LEMMA_FILENAME,
    WORD_PROGRESS_FILENAME,
    LemmaKnowledgeSet,
    WordProgressStore,
    init_stores,
)


@pytest.fixture
def progression_dir(tmp_path):
    return tmp_path / "progression"


@pytest.fixture
def lemma_set(progression_dir):
    return LemmaKnowledgeSet(JsonDocument(progression_dir / LEMMA_FILENAME, default=list))


@pytest.fixture
def word_store(progression_dir):
    return WordProgressStore(
        JsonDocument(progression_dir / WORD_PROGRESS_FILENAME, default=lambda: {"words": []})
    )


@pytest.fixture
def live_stores(progression_dir):
    """Point the process-wide stores (used by the views) at a temp directory."""
    return init_stores(progression_dir)


@pytest.fixture
def ayat_al_kursi():
    return IdentityKey(2, 255, 3, 3)
