from pathlib import Path
from types import SimpleNamespace
import sys

import pytest
from postgrest.exceptions import APIError

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.config import Settings
from elphub.crud import SupabaseCRUD
from elphub.errors import ConfigurationError


class FakeQuery:
    """Records the builder chain; ``execute`` returns the canned rows or raises."""

    def __init__(self, log, rows=None, error=None):
        self.log = log
        self.rows = rows
        self.error = error

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.log.append((name, args, kwargs))
            return self
        return step

    def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.rows)


class FakeSupabase:
    def __init__(self, rows=None, error=None):
        self.log = []
        self.rows = rows
        self.error = error

    def table(self, name):
        self.log.append(("table", (name,), {}))
        return FakeQuery(self.log, self.rows, self.error)

    def rpc(self, fn, params):
        self.log.append(("rpc", (fn, params), {}))
        return FakeQuery(self.log, self.rows, self.error)


def test_fetch_rows_builds_query():
    client = FakeSupabase(rows=[{"id": 1}])
    resp = SupabaseCRUD(client).fetch_rows(
        "contacts", select="id, message", limit=5, filters={"status": "new"}, order_by="created_at", desc=True,
    )

    assert resp.ok
    assert resp.data == [{"id": 1}]
    assert client.log == [
        ("table", ("contacts",), {}),
        ("select", ("id, message",), {}),
        ("eq", ("status", "new"), {}),
        ("order", ("created_at",), {"desc": True}),
        ("limit", (5,), {}),
    ]


def test_update_and_delete_match_columns():
    client = FakeSupabase(rows=[])
    crud = SupabaseCRUD(client)

    crud.update_rows("contacts", {"id": "c1"}, {"priority": "high"})
    crud.delete_rows("contacts", {"id": "c2"})

    assert ("update", ({"priority": "high"},), {}) in client.log
    assert ("eq", ("id", "c1"), {}) in client.log
    assert ("delete", (), {}) in client.log
    assert ("eq", ("id", "c2"), {}) in client.log


def test_insert_and_rpc():
    client = FakeSupabase(rows=[{"id": 9}])
    crud = SupabaseCRUD(client)
    assert crud.insert_row("contacts", {"name": "Ana"}).data == [{"id": 9}]
    assert crud.rpc("match_documents", {"k": 3}).ok
    assert ("rpc", ("match_documents", {"k": 3}), {}) in client.log


def test_database_errors_are_returned():
    error = APIError({"message": "permission denied for table contacts", "code": "42501"})
    resp = SupabaseCRUD(FakeSupabase(error=error)).fetch_rows("contacts")
    assert not resp.ok
    assert resp.error == "permission denied for table contacts"


def test_latest_row():
    assert SupabaseCRUD(FakeSupabase(rows=[{"id": "new"}])).latest_row("email_signature_settings").data == {"id": "new"}
    assert SupabaseCRUD(FakeSupabase(rows=[])).latest_row("email_signature_settings").data is None


def test_from_settings_requires_configuration():
    with pytest.raises(ConfigurationError):
        SupabaseCRUD.from_settings(Settings())
