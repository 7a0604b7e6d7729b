"""Tests for melodyquest.core.ledger – collected notes and one-shot flags."""

from __future__ import annotations

import json

import pytest

from melodyquest.core.ledger import LEDGER_KEY, CompletionFlags, LedgerPolicy, RewardLedger
from melodyquest.core.storage import MemoryStore

ALPHABET = "ABCDEF"


# ===========================================================================
# RewardLedger
# ===========================================================================

class TestRewardLedger:
    def test_starts_empty(self):
        ledger = RewardLedger(MemoryStore(), ALPHABET)
        assert ledger.load() == []
        assert len(ledger) == 0

    def test_add_persists_json_array(self):
        store = MemoryStore()
        ledger = RewardLedger(store, ALPHABET)
        assert ledger.add("C") is True
        assert json.loads(store.get(LEDGER_KEY)) == ["C"]

    def test_keeps_insertion_order(self):
        ledger = RewardLedger(MemoryStore(), ALPHABET)
        for token in ("E", "C", "D"):
            ledger.add(token)
        assert ledger.tokens == ["E", "C", "D"]

    def test_dedupe_ignores_repeat(self):
        store = MemoryStore()
        ledger = RewardLedger(store, ALPHABET)
        ledger.add("C")
        assert ledger.add("C") is False
        assert ledger.tokens == ["C"]
        assert json.loads(store.get(LEDGER_KEY)) == ["C"]

    def test_append_keeps_repeat(self):
        ledger = RewardLedger(MemoryStore(), ALPHABET, LedgerPolicy.APPEND)
        ledger.add("C")
        assert ledger.add("C") is True
        assert ledger.tokens == ["C", "C"]

    def test_policy_from_string(self):
        assert RewardLedger(MemoryStore(), ALPHABET, "append").policy is LedgerPolicy.APPEND

    def test_unknown_token_rejected(self):
        with pytest.raises(ValueError):
            RewardLedger(MemoryStore(), ALPHABET).add("Z")

    def test_tokens_is_copy(self):
        ledger = RewardLedger(MemoryStore(), ALPHABET)
        ledger.add("A")
        ledger.tokens.append("B")
        assert ledger.tokens == ["A"]

    def test_contains(self):
        ledger = RewardLedger(MemoryStore(), ALPHABET)
        ledger.add("E")
        assert "E" in ledger
        assert "C" not in ledger

    def test_load_restores(self):
        ledger = RewardLedger(MemoryStore({LEDGER_KEY: '["C", "E"]'}), ALPHABET)
        assert ledger.load() == ["C", "E"]

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42"])
    def test_corrupt_loads_empty(self, raw: str):
        ledger = RewardLedger(MemoryStore({LEDGER_KEY: raw}), ALPHABET)
        assert ledger.load() == []

    def test_unknown_entries_dropped(self):
        ledger = RewardLedger(MemoryStore({LEDGER_KEY: '["C", "Z", 3, "E"]'}), ALPHABET)
        assert ledger.load() == ["C", "E"]

    def test_clear_removes_key(self):
        store = MemoryStore()
        ledger = RewardLedger(store, ALPHABET)
        ledger.add("C")
        ledger.clear()
        assert ledger.tokens == []
        assert store.get(LEDGER_KEY) is None


# ===========================================================================
# CompletionFlags
# ===========================================================================

class TestCompletionFlags:
    def test_key_format(self):
        assert CompletionFlags(MemoryStore(), "mq-reward-").key(5) == "mq-reward-5"

    def test_set_persists_one(self):
        store = MemoryStore()
        flags = CompletionFlags(store, "mq-reward-")
        flags.set(5)
        assert flags.is_set(5)
        assert store.get("mq-reward-5") == "1"

    def test_load_only_exact_one(self):
        store = MemoryStore({"mq-reward-1": "1", "mq-reward-2": "true", "mq-reward-3": "0"})
        flags = CompletionFlags(store, "mq-reward-")
        assert flags.load(8) == {1: True}

    def test_load_ignores_out_of_range(self):
        flags = CompletionFlags(MemoryStore({"mq-reward-9": "1"}), "mq-reward-")
        assert flags.load(8) == {}

    def test_clear(self):
        store = MemoryStore({"mq-quiz-6": "1"})
        flags = CompletionFlags(store, "mq-quiz-")
        flags.load(8)
        flags.clear(8)
        assert not flags.is_set(6)
        assert store.get("mq-quiz-6") is None
