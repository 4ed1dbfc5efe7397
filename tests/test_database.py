import pytest

import database
from database import execute, fetch_one, transaction
from errors import DatabaseConnectionError, IntegrityViolation, QueryError


def insert_user(name="Ana", email="ana@x.com", conn=None):
    return execute(
        "INSERT INTO users (name, email, password_hash) VALUES (?, ?, ?)",
        (name, email, "hash"),
        conn=conn,
    )


def test_execute_returns_insert_id_and_rows():
    result = insert_user()
    assert result["insert_id"] == 1
    assert result["affected_rows"] == 1

    rows = execute("SELECT id, name FROM users WHERE email = ?", ("ana@x.com",))
    assert rows == [{"id": 1, "name": "Ana"}]


def test_parameters_are_bound_not_interpolated():
    hostile = "x'); DROP TABLE users; --"
    insert_user(name=hostile)

    row = fetch_one("SELECT name FROM users WHERE email = ?", ("ana@x.com",))
    assert row["name"] == hostile
    assert fetch_one("SELECT COUNT(*) AS count FROM users")["count"] == 1


def test_transaction_rolls_back_on_error():
    with pytest.raises(RuntimeError):
        with transaction() as conn:
            insert_user(conn=conn)
            raise RuntimeError("boom")

    assert execute("SELECT * FROM users") == []


def test_transaction_commits():
    with transaction() as conn:
        insert_user(conn=conn)
        insert_user(name="Bia", email="bia@x.com", conn=conn)

    assert fetch_one("SELECT COUNT(*) AS count FROM users")["count"] == 2


def test_unique_email_is_enforced_by_storage():
    insert_user()
    with pytest.raises(IntegrityViolation):
        insert_user(name="Other")


def test_bad_sql_raises_query_error_with_detail():
    with pytest.raises(QueryError) as excinfo:
        execute("SELECT * FROM no_such_table")
    assert "no_such_table" in excinfo.value.detail
    assert "no_such_table" not in excinfo.value.message


def test_unreachable_store_raises_connection_error(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_NAME", str(tmp_path / "missing" / "db.sqlite3"))
    with pytest.raises(DatabaseConnectionError):
        execute("SELECT 1")


def test_foreign_keys_are_enforced():
    with pytest.raises(IntegrityViolation):
        execute("INSERT INTO posts (user_id, content) VALUES (?, ?)", (999, "orphan"))
