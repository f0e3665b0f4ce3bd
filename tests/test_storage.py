import json

import pytest

from block_blast.game import Difficulty, JsonFileStore, MemoryStore, PlayerRecord
from block_blast.game.storage import (
    COINS_KEY,
    DIFFICULTIES,
    DIFFICULTY_KEY,
    HIGH_SCORE_KEY,
    MAX_LEVEL_KEY,
    PLAYER_NAME_KEY,
)


def test_record_defaults_from_empty_store():
    record = PlayerRecord.load(MemoryStore())
    assert record == PlayerRecord(high_score=0, coins=0, max_level=1, player_name="", difficulty="medium")


def test_record_ignores_garbled_numbers():
    store = MemoryStore({HIGH_SCORE_KEY: "lots", COINS_KEY: "12"})
    record = PlayerRecord.load(store)
    assert record.high_score == 0
    assert record.coins == 12


@pytest.mark.parametrize("raw", ["insane", "", "HARD"])
def test_record_falls_back_on_unknown_difficulty(raw):
    record = PlayerRecord.load(MemoryStore({DIFFICULTY_KEY: raw}))
    assert record.difficulty == "medium"
    assert Difficulty(record.difficulty) is Difficulty.MEDIUM


def test_saved_difficulty_is_loaded():
    record = PlayerRecord.load(MemoryStore({DIFFICULTY_KEY: "hard"}))
    assert Difficulty(record.difficulty) is Difficulty.HARD


def test_stored_difficulties_match_enum():
    assert set(DIFFICULTIES) == {d.value for d in Difficulty}


def test_high_score_only_written_when_beaten():
    store = MemoryStore({HIGH_SCORE_KEY: "500"})
    record = PlayerRecord.load(store)
    assert not record.record_score(store, 300)
    assert store.get(HIGH_SCORE_KEY) == "500"
    assert record.record_score(store, 800)
    assert store.get(HIGH_SCORE_KEY) == "800"


def test_max_level_and_preferences():
    store = MemoryStore()
    record = PlayerRecord.load(store)
    record.record_level(store, 3)
    record.save_preferences(store, "sam", "hard")
    assert store.get(MAX_LEVEL_KEY) == "3"
    assert store.get(PLAYER_NAME_KEY) == "sam"
    assert store.get(DIFFICULTY_KEY) == "hard"


def test_json_store_round_trip(tmp_path):
    path = tmp_path / "save" / "block_blast.json"
    store = JsonFileStore(str(path))
    assert store.get(COINS_KEY) is None
    store.set(COINS_KEY, "70")
    store.set(COINS_KEY, "90")
    assert json.loads(path.read_text(encoding="utf-8")) == {COINS_KEY: "90"}
    assert JsonFileStore(str(path)).get(COINS_KEY) == "90"


def test_json_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "block_blast.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(str(path))
    assert store.get(HIGH_SCORE_KEY) is None
    store.set(HIGH_SCORE_KEY, "10")
    assert JsonFileStore(str(path)).get(HIGH_SCORE_KEY) == "10"
