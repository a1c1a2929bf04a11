"""Tests for persistent storage and the player wallet."""

import json

import pytest

from neon_snake.economy import (
    CURRENCY_KEY,
    HIGH_SCORE_KEY,
    JsonFileStorage,
    MemoryStorage,
    Storage,
    Wallet,
)
from neon_snake.orchestrator import GameOrchestrator


class TestStorageInterface:
    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            Storage()

    def test_backend_must_implement_set(self):
        class ReadOnly(Storage):
            def get(self, key, default=None):
                return default

        with pytest.raises(TypeError):
            ReadOnly()

    def test_unbuffered_backend_has_nothing_pending(self):
        storage = MemoryStorage()
        storage.set(CURRENCY_KEY, 1)
        assert storage.take_pending() is None
        assert storage.flush()


class TestJsonFileStorage:
    def test_roundtrip(self, tmp_path):
        path = tmp_path / "save" / "store.json"
        storage = JsonFileStorage(path)
        assert storage.set("high_score", 120)
        assert JsonFileStorage(path).get("high_score") == 120

    def test_missing_file_gives_defaults(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "absent.json")
        assert storage.get("currency", 0) == 0

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)
        assert storage.get("high_score") is None

    def test_non_object_document_is_ignored(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps([1, 2, 3]))
        assert JsonFileStorage(path).get("high_score", 0) == 0

    def test_write_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("occupied")
        storage = JsonFileStorage(blocker / "store.json")
        assert storage.set("currency", 5) is False
        # The in-memory value survives so play can continue.
        assert storage.get("currency") == 5

    def test_deferred_writes_wait_for_flush(self, tmp_path):
        path = tmp_path / "store.json"
        storage = JsonFileStorage(path, autoflush=False)
        assert storage.set(CURRENCY_KEY, 9)
        assert not path.exists()
        assert storage.flush()
        assert json.loads(path.read_text()) == {CURRENCY_KEY: 9}
        assert storage.take_pending() is None

    def test_take_pending_then_write(self, tmp_path):
        path = tmp_path / "store.json"
        storage = JsonFileStorage(path, autoflush=False)
        storage.set(HIGH_SCORE_KEY, 40)
        payload = storage.take_pending()
        assert storage.take_pending() is None
        assert storage.write(payload)
        assert JsonFileStorage(path).get(HIGH_SCORE_KEY) == 40


class TestWallet:
    def test_defaults(self):
        wallet = Wallet()
        assert wallet.high_score == 0
        assert wallet.currency == 0
        assert wallet.owned_skins == ["neon"]
        assert wallet.selected_skin == "neon"

    def test_loads_stored_values(self):
        storage = MemoryStorage({HIGH_SCORE_KEY: 300, CURRENCY_KEY: "12"})
        wallet = Wallet(storage)
        assert wallet.high_score == 300
        assert wallet.currency == 12

    def test_garbage_values_fall_back(self):
        storage = MemoryStorage({HIGH_SCORE_KEY: "lots", "owned_skins": "all"})
        wallet = Wallet(storage)
        assert wallet.high_score == 0
        assert wallet.owned_skins == ["neon"]

    @pytest.mark.parametrize("score,reward", [(0, 0), (9, 0), (10, 1), (95, 9), (1000, 100)])
    def test_death_reward(self, score, reward):
        assert Wallet().death_reward(score) == reward

    def test_death_reward_non_decreasing(self):
        wallet = Wallet()
        rewards = [wallet.death_reward(s) for s in range(0, 500, 7)]
        assert rewards == sorted(rewards)

    def test_award_persists(self):
        storage = MemoryStorage()
        wallet = Wallet(storage)
        assert wallet.award(3) == 3
        assert wallet.award(0) == 3
        assert storage.get(CURRENCY_KEY) == 3

    def test_record_score(self):
        storage = MemoryStorage()
        wallet = Wallet(storage)
        assert wallet.record_score(50)
        assert not wallet.record_score(50)
        assert not wallet.record_score(10)
        assert storage.get(HIGH_SCORE_KEY) == 50

    def test_purchase_skin(self):
        wallet = Wallet()
        assert not wallet.purchase_skin("python")
        wallet.award(40)
        assert wallet.purchase_skin("python")
        assert wallet.currency == 10
        assert "python" in wallet.owned_skins
        assert not wallet.purchase_skin("python")
        assert not wallet.purchase_skin("unicorn")

    def test_select_skin(self):
        wallet = Wallet()
        assert not wallet.select_skin("phantom")
        wallet.award(200)
        wallet.purchase_skin("phantom")
        assert wallet.select_skin("phantom")
        assert wallet.to_dict()["selected_skin"] == "phantom"

    def test_survives_failing_storage(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("occupied")
        wallet = Wallet(JsonFileStorage(blocker / "store.json"))
        wallet.award(7)
        assert wallet.record_score(40)
        assert wallet.currency == 7
        assert wallet.high_score == 40


class TestSharedStorage:
    def test_wallets_add_up(self, tmp_path):
        path = tmp_path / "store.json"
        storage = JsonFileStorage(path)
        a, b = Wallet(storage), Wallet(storage)
        a.award(5)
        b.award(3)
        assert a.currency == b.currency == 8
        assert JsonFileStorage(path).get(CURRENCY_KEY) == 8

    def test_high_score_is_not_lowered(self):
        storage = MemoryStorage()
        a, b = Wallet(storage), Wallet(storage)
        assert a.record_score(90)
        assert not b.record_score(40)
        assert storage.get(HIGH_SCORE_KEY) == 90
        assert b.high_score == 90

    def test_purchase_sees_other_awards(self):
        storage = MemoryStorage()
        a, b = Wallet(storage), Wallet(storage)
        a.award(30)
        assert b.purchase_skin("python")
        assert a.currency == 0
        assert "python" in a.owned_skins

    def test_sessions_share_one_store(self, tmp_path):
        path = tmp_path / "store.json"
        storage = JsonFileStorage(path)
        first = GameOrchestrator(seed=1, storage=storage)
        second = GameOrchestrator(seed=2, storage=storage)
        first.wallet.award(5)
        second.wallet.award(3)
        assert first.snapshot()["wallet"]["currency"] == 8
        assert JsonFileStorage(path).get(CURRENCY_KEY) == 8
