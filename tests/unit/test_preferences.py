"""Tests for preference stores."""

from __future__ import annotations

import json

from deploylens.core.preferences import (
    JsonPreferenceStore,
    MemoryPreferenceStore,
    PreferenceStore,
)


class TestMemoryPreferenceStore:
    def test_roundtrip(self):
        store = MemoryPreferenceStore()
        assert store.get("k") is None
        store.set("k", False)
        assert store.get("k") is False

    def test_satisfies_protocol(self):
        assert isinstance(MemoryPreferenceStore(), PreferenceStore)


class TestJsonPreferenceStore:
    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonPreferenceStore(tmp_path / "prefs.json")
        assert store.get("logs-a") is None

    def test_set_creates_parents_and_persists(self, tmp_path):
        path = tmp_path / "nested" / "prefs.json"
        JsonPreferenceStore(path).set("logs-a", False)
        assert json.loads(path.read_text()) == {"logs-a": False}
        assert JsonPreferenceStore(path).get("logs-a") is False

    def test_keeps_other_keys(self, tmp_path):
        store = JsonPreferenceStore(tmp_path / "prefs.json")
        store.set("logs-a", True)
        store.set("logs-b", False)
        assert store.get("logs-a") is True
        assert store.get("logs-b") is False

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("{not json")
        store = JsonPreferenceStore(path)
        assert store.get("logs-a") is None
        store.set("logs-a", True)
        assert store.get("logs-a") is True

    def test_non_bool_values_ignored(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"logs-a": "yes"}))
        assert JsonPreferenceStore(path).get("logs-a") is None

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(JsonPreferenceStore(tmp_path / "p.json"), PreferenceStore)
