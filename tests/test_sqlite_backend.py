"""
Tests for the local SQLite backend
"""
import pytest

from survey_portal.app.errors import AuthenticationFailed, BackendError
from survey_portal.db.connection import db_session
from survey_portal.db.sqlite_backend import SQLiteBackend, hash_password, verify_password


def _location(name, wards=3):
    return {"name": name, "name_ml": None, "ward_count": wards}


class TestTableOperations:
    def test_insert_fills_id_and_timestamp(self, backend):
        rows = backend.insert("panchayaths", [_location("Kadakkal")])

        assert len(rows) == 1
        assert rows[0]["name"] == "Kadakkal"
        assert rows[0]["id"]
        assert rows[0]["created_at"].endswith("Z")

    def test_insert_without_read_back_still_writes(self, backend):
        assert backend.insert("panchayaths", [_location("Kadakkal")], returning=False) == []

        assert backend.select("panchayaths", "name") == [{"name": "Kadakkal"}]

    def test_insert_nothing(self, backend):
        assert backend.insert("panchayaths", []) == []

    def test_select_columns_filters_and_order(self, backend):
        backend.insert("panchayaths", [_location("Kollam", 5), _location("Anchal", 20), _location("Chadayam", 5)])

        rows = backend.select("panchayaths", "name, ward_count", filters={"ward_count": 5}, order_by="name")

        assert rows == [{"name": "Chadayam", "ward_count": 5}, {"name": "Kollam", "ward_count": 5}]

    def test_descending_ties_keep_insertion_order(self, backend):
        backend.insert("panchayaths", [_location("B", 2), _location("A", 2), _location("C", 9)])

        rows = backend.select("panchayaths", "name", order_by="ward_count", descending=True)

        assert [r["name"] for r in rows] == ["C", "B", "A"]

    def test_update_returns_changed_rows(self, backend):
        row = backend.insert("panchayaths", [_location("Kadakal")])[0]

        updated = backend.update("panchayaths", {"name": "Kadakkal"}, {"id": row["id"]})

        assert [r["name"] for r in updated] == ["Kadakkal"]
        assert backend.select("panchayaths", "name") == [{"name": "Kadakkal"}]

    def test_delete_returns_removed_rows(self, backend):
        keep, drop = backend.insert("panchayaths", [_location("Keep"), _location("Drop")])

        removed = backend.delete("panchayaths", {"id": drop["id"]})

        assert [r["id"] for r in removed] == [drop["id"]]
        assert [r["id"] for r in backend.select("panchayaths")] == [keep["id"]]

    def test_mutations_need_a_filter(self, backend):
        with pytest.raises(ValueError):
            backend.delete("panchayaths", {})
        with pytest.raises(ValueError):
            backend.update("panchayaths", {"name": "x"}, {})

    def test_unknown_identifiers_rejected(self, backend):
        with pytest.raises(BackendError):
            backend.select("orders")
        with pytest.raises(BackendError):
            backend.select("panchayaths", "name; DROP TABLE panchayaths")
        with pytest.raises(BackendError):
            backend.select("panchayaths", order_by="nope")

    def test_constraint_violation_is_backend_error(self, backend):
        with pytest.raises(BackendError):
            backend.insert("panchayaths", [_location("Kadakkal", 0)])

    def test_data_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "survey.db")
        SQLiteBackend(path).insert("panchayaths", [_location("Kadakkal")])

        assert SQLiteBackend(path).select("panchayaths", "name") == [{"name": "Kadakkal"}]


class TestPasswords:
    def test_hash_roundtrip(self):
        stored = hash_password("s3cret", rounds=4)

        assert isinstance(stored, str)
        assert stored.startswith("$2b$04$")
        assert verify_password("s3cret", stored)
        assert not verify_password("S3cret", stored)

    def test_salted_per_call(self):
        assert hash_password("s3cret", rounds=4) != hash_password("s3cret", rounds=4)

    def test_malformed_hash(self):
        assert not verify_password("s3cret", "plain-text")

    def test_stored_hash_is_bcrypt_text(self, backend):
        user_id = backend.ensure_user("admin@example.org", "pw-123")

        with db_session(backend.db_path) as conn:
            stored = conn.execute("SELECT password_hash FROM users WHERE id = ?", (user_id,)).fetchone()[0]

        assert stored.startswith("$2b$")
        assert verify_password("pw-123", stored)


class TestLocalAuth:
    def test_sign_in_and_out(self, backend):
        user_id = backend.ensure_user("Admin@Example.org", "pw-123", roles=("admin",))

        session = backend.sign_in("admin@example.org", "pw-123")

        assert session.user.user_id == user_id
        assert session.access_token
        assert backend.get_session() == session

        backend.sign_out()
        assert backend.get_session() is None

    def test_bad_credentials(self, backend):
        backend.ensure_user("admin@example.org", "pw-123")

        with pytest.raises(AuthenticationFailed):
            backend.sign_in("admin@example.org", "nope")
        with pytest.raises(AuthenticationFailed):
            backend.sign_in("ghost@example.org", "pw-123")

    def test_ensure_user_is_idempotent(self, backend, repo):
        first = backend.ensure_user("admin@example.org", "old", roles=("admin",))
        second = backend.ensure_user("admin@example.org", "new", roles=("admin",))

        assert first == second
        assert len(backend.select("user_roles", filters={"user_id": first})) == 1
        assert repo.has_role(first)
        backend.sign_in("admin@example.org", "new")

    def test_user_without_role(self, backend, repo):
        user_id = backend.ensure_user("visitor@example.org", "pw")

        assert not repo.has_role(user_id)
