"""
Tests for preference storage channels
"""
import json

from student_gateway.preferences import (
    InMemoryKeyValueStore, JsonFileKeyValueStore, Language, PreferenceStore
)


class TestKeyValueStores:

    def test_in_memory_store(self):
        store = InMemoryKeyValueStore({"a": "1"})

        assert store.get("a") == "1"
        assert store.get("missing") is None

        store.set("b", "2")
        assert store.get("b") == "2"
        assert store.delete("b") is True
        assert store.delete("b") is False

    def test_json_file_store_persists_across_instances(self, tmp_path):
        path = tmp_path / "cookies" / "profile.json"

        JsonFileKeyValueStore(path).set("studentId", "u1")
        reopened = JsonFileKeyValueStore(path)

        assert reopened.get("studentId") == "u1"
        assert json.loads(path.read_text()) == {"studentId": "u1"}

    def test_json_file_store_delete(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "profile.json")
        store.set("studentId", "u1")

        assert store.delete("studentId") is True
        assert store.get("studentId") is None
        assert store.delete("studentId") is False

    def test_json_file_store_tolerates_corrupt_file(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("{corrupt")
        store = JsonFileKeyValueStore(path)

        assert store.get("studentId") is None
        store.set("studentId", "u2")
        assert store.get("studentId") == "u2"


class TestPreferenceStore:

    def test_profile_round_trip(self, preference_store, profile_store):
        preference_store.set_profile({"language": "Hindi", "name": "Asha"})

        assert json.loads(profile_store.get("profile")) == {"language": "Hindi", "name": "Asha"}
        assert preference_store.get_profile() == {"language": "Hindi", "name": "Asha"}

    def test_unreadable_profile_is_absent(self, preference_store, profile_store, mock_logger):
        profile_store.set("profile", "not-json")

        assert preference_store.get_profile() is None
        mock_logger.warning.assert_called_once()

    def test_non_object_profile_is_absent(self, preference_store, profile_store):
        profile_store.set("profile", json.dumps(["Hindi"]))

        assert preference_store.get_profile() is None

    def test_session_language(self, preference_store, session_store):
        assert preference_store.get_session_language() is None

        preference_store.set_session_language(Language.HINDI)

        assert session_store.get("appLanguage") == "Hindi"
        assert preference_store.get_session_language() == "Hindi"

    def test_identity_precedence(self, profile_store, session_store, mock_logger):
        store = PreferenceStore(profile_store, session_store, mock_logger)
        assert store.get_identity() is None

        session_store.set("studentId", "from-session")
        assert store.get_identity() == "from-session"

        profile_store.set("studentId", "from-profile")
        assert store.get_identity() == "from-profile"

    def test_empty_identity_is_absent(self, preference_store, profile_store):
        profile_store.set("studentId", "")

        assert preference_store.get_identity() is None
