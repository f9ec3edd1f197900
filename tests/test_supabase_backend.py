"""
Tests for the hosted backend adapter, against a mocked Supabase client
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod
from supabase import AuthError

from survey_portal.app.errors import AuthenticationFailed, BackendError
from survey_portal.db.repository import SurveyRepository
from survey_portal.db.supabase_backend import SupabaseBackend


class _Rejected(AuthError):
    def __init__(self, message="Invalid login credentials"):
        Exception.__init__(self, message)
        self.message = message


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def backend(client):
    return SupabaseBackend(client)


def _query(client, data=None, error=None):
    # Every builder call returns the same chainable mock.
    query = MagicMock()
    for name in ("select", "insert", "update", "delete", "eq", "order"):
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = SimpleNamespace(data=data)
    client.table.return_value = query
    return query


class TestTableOperations:
    def test_select_builds_query(self, client, backend):
        query = _query(client, data=[{"id": "s1"}])

        rows = backend.select("surveys", "id", filters={"panchayath": "Kadakkal"}, order_by="created_at", descending=True)

        assert rows == [{"id": "s1"}]
        client.table.assert_called_with("surveys")
        query.select.assert_called_once_with("id")
        query.eq.assert_called_once_with("panchayath", "Kadakkal")
        query.order.assert_called_once_with("created_at", desc=True)

    def test_select_without_data(self, client, backend):
        _query(client, data=None)

        assert backend.select("surveys") == []

    def test_insert_batches_rows(self, client, backend):
        query = _query(client, data=[{"id": 1}, {"id": 2}])

        rows = backend.insert("survey_items", [{"item_name": "Soap"}, {"item_name": "Rice"}])

        assert len(rows) == 2
        query.insert.assert_called_once_with(
            [{"item_name": "Soap"}, {"item_name": "Rice"}], returning=ReturnMethod.representation
        )
        assert query.execute.call_count == 1

    def test_insert_without_read_back(self, client, backend):
        query = _query(client, data=[])

        rows = backend.insert("survey_items", [{"item_name": "Soap"}], returning=False)

        assert rows == []
        query.insert.assert_called_once_with([{"item_name": "Soap"}], returning=ReturnMethod.minimal)

    def test_line_items_are_written_without_read_back(self, client, backend):
        query = _query(client, data=[])

        count = SurveyRepository(backend).insert_line_items("s1", ["Soap", "Rice"], "product")

        assert count == 2
        query.insert.assert_called_once_with(
            [
                {"survey_id": "s1", "item_name": "Soap", "item_type": "product"},
                {"survey_id": "s1", "item_name": "Rice", "item_type": "product"},
            ],
            returning=ReturnMethod.minimal,
        )

    def test_update_and_delete_are_filtered(self, client, backend):
        query = _query(client, data=[])

        backend.update("panchayaths", {"name": "Kadakkal"}, {"id": "p1"})
        backend.delete("panchayaths", {"id": "p1"})

        assert [c.args for c in query.eq.call_args_list] == [("id", "p1"), ("id", "p1")]
        with pytest.raises(ValueError):
            backend.delete("panchayaths", {})

    def test_api_error_is_backend_error(self, client, backend):
        _query(client, error=APIError({"message": "permission denied", "code": "42501"}))

        with pytest.raises(BackendError):
            backend.select("surveys")

    def test_transport_error_is_backend_error(self, client, backend):
        _query(client, error=httpx.ConnectError("connection refused"))

        with pytest.raises(BackendError):
            backend.insert("surveys", [{"name": "Anu"}])


class TestAuth:
    def test_no_session(self, client, backend):
        client.auth.get_session.return_value = None

        assert backend.get_session() is None

    def test_session(self, client, backend):
        client.auth.get_session.return_value = SimpleNamespace(
            user=SimpleNamespace(id="u1", email="admin@example.org"),
            access_token="token",
        )

        session = backend.get_session()

        assert session.user.user_id == "u1"
        assert session.access_token == "token"

    def test_sign_in(self, client, backend):
        client.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=SimpleNamespace(id="u1", email="admin@example.org"),
            session=SimpleNamespace(access_token="token"),
        )

        session = backend.sign_in("admin@example.org", "pw")

        assert session.user.email == "admin@example.org"
        client.auth.sign_in_with_password.assert_called_once_with({"email": "admin@example.org", "password": "pw"})

    def test_sign_in_rejected(self, client, backend):
        client.auth.sign_in_with_password.side_effect = _Rejected()

        with pytest.raises(AuthenticationFailed):
            backend.sign_in("admin@example.org", "bad")

    def test_sign_in_without_session(self, client, backend):
        client.auth.sign_in_with_password.return_value = SimpleNamespace(user=None, session=None)

        with pytest.raises(AuthenticationFailed):
            backend.sign_in("admin@example.org", "pw")

    def test_sign_out_failure_is_not_raised(self, client, backend):
        client.auth.sign_out.side_effect = httpx.ReadTimeout("timeout")

        backend.sign_out()

        client.auth.sign_out.assert_called_once()
