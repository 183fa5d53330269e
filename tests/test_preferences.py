"""
Tests for PreferenceStore

Learned keys live in the user config file next to settings the store
does not own; every write has to keep those intact.
"""

import pytest
import yaml

from tidyup.preferences import PreferenceStore, PreferenceStoreError


@pytest.fixture
def store(tmp_path):
    return PreferenceStore(tmp_path / "config.yaml")


class TestLoad:

    def test_missing_file_is_empty(self, store):
        assert store.load() == set()

    def test_missing_key_is_empty(self, store):
        store.path.write_text("display:\n  symbols: ascii\n")
        assert store.load() == set()

    def test_malformed_yaml_raises(self, store):
        store.path.write_text("cleanup: [unclosed\n")
        with pytest.raises(PreferenceStoreError, match="Malformed"):
            store.load()

    def test_non_mapping_raises(self, store):
        store.path.write_text("- just\n- a list\n")
        with pytest.raises(PreferenceStoreError):
            store.load()


class TestRemember:

    def test_remember_returns_new_count(self, store):
        assert store.remember(["backup-files@v1", "build-dist@v1"]) == 2
        assert store.remember(["backup-files@v1", "temp-files@v1"]) == 1
        assert store.load() == {"backup-files@v1", "build-dist@v1", "temp-files@v1"}

    def test_union_is_monotonic(self, store):
        store.remember(["a@v1", "b@v1"])
        before = store.load()
        store.remember(["c@v1"])
        assert before <= store.load()

    def test_preserves_other_keys(self, store):
        store.path.write_text("display:\n  symbols: ascii\ncleanup:\n  keep_me: true\n")
        store.remember(["build-dist@v1"])

        data = yaml.safe_load(store.path.read_text())
        assert data["display"] == {"symbols": "ascii"}
        assert data["cleanup"]["keep_me"] is True
        assert data["cleanup"]["safe_to_delete"] == ["build-dist@v1"]

    def test_written_sorted_and_unique(self, store):
        store.remember(["z@v1", "a@v1", "z@v1"])
        data = yaml.safe_load(store.path.read_text())
        assert data["cleanup"]["safe_to_delete"] == ["a@v1", "z@v1"]

    def test_nothing_to_remember_does_not_write(self, store):
        assert store.remember([]) == 0
        assert not store.path.exists()

    def test_creates_parent_directory(self, tmp_path):
        store = PreferenceStore(tmp_path / "nested" / "config.yaml")
        store.remember(["x@v1"])
        assert store.is_approved("x@v1")


class TestPruning:

    def test_forget(self, store):
        store.remember(["a@v1", "b@v1"])
        assert store.forget(["a@v1", "unknown@v1"]) == 1
        assert store.load() == {"b@v1"}

    def test_clear(self, store):
        store.remember(["a@v1", "b@v1"])
        assert store.clear() == 2
        assert store.load() == set()
        assert store.clear() == 0

    def test_versioned_key_does_not_match_old_approval(self, store):
        store.remember(["build-dist@v1"])
        assert store.is_approved("build-dist@v1")
        assert not store.is_approved("build-dist@v2")
