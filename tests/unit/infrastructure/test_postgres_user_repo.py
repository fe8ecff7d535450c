"""
Name: PostgresUserRepository Unit Tests

Responsibilities:
  - UniqueViolation on email -> UniqueEmailError; on pk -> DatabaseError
  - Row mapping (roles cast to UserRole, TranslationError on drift)
  - NotFound semantics and query_by_ids contract
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from psycopg.errors import UniqueViolation

from bhms.crosscutting.exceptions import (
    DatabaseError,
    ErrorKind,
    TranslationError,
    UniqueEmailError,
    UserNotFoundError,
)
from bhms.domain.entities import UserEntity, UserRole
from bhms.infrastructure.db.transaction import PostgresTransaction
from bhms.infrastructure.repositories.postgres.user import PostgresUserRepository

pytestmark = pytest.mark.unit

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class _UniqueViolation(UniqueViolation):
    """UniqueViolation con diag controlado (psycopg lo arma desde el server)."""

    def __init__(self, constraint_name):
        super().__init__("duplicate key value violates unique constraint")
        self._constraint_name = constraint_name

    @property
    def diag(self):
        return SimpleNamespace(constraint_name=self._constraint_name)


def _exec_context(conn):
    ctx = MagicMock()

    @contextmanager
    def _connection():
        yield conn

    ctx.connection.side_effect = _connection
    return ctx


def _user(**overrides) -> UserEntity:
    data = dict(
        id=uuid4(),
        name="Ana",
        email="ana@example.com",
        password_hash="$argon2id$v=19$m=1024,t=1,p=1$c2FsdA$aGFzaA",
        roles=(UserRole.USER, UserRole.ADMIN),
        department="ops",
        enabled=True,
        created_at=NOW,
        updated_at=NOW,
    )
    data.update(overrides)
    return UserEntity(**data)


def _row(user: UserEntity):
    return (
        str(user.id),
        user.name,
        user.email,
        user.password_hash,
        [r.value for r in user.roles],
        user.department,
        user.enabled,
        user.created_at,
        user.updated_at,
    )


@pytest.fixture
def conn():
    return MagicMock()


@pytest.fixture
def repo(conn):
    return PostgresUserRepository(exec_context=_exec_context(conn))


class TestWrites:
    def test_create_sends_roles_as_text_array(self, repo, conn):
        user = _user()

        repo.create(user)

        sql, params = conn.execute.call_args.args
        assert "INSERT INTO users" in sql
        assert params["roles"] == ["USER", "ADMIN"]
        assert params["id"] == str(user.id)

    def test_duplicate_email_raises_unique_email(self, repo, conn):
        conn.execute.side_effect = _UniqueViolation("uq_users_email")

        with pytest.raises(UniqueEmailError, match=r"email\[ana@example.com\]") as exc_info:
            repo.create(_user())

        assert exc_info.value.kind is ErrorKind.UNIQUE_EMAIL

    def test_duplicate_primary_key_is_database_error(self, repo, conn):
        conn.execute.side_effect = _UniqueViolation("pk_users")

        with pytest.raises(DatabaseError) as exc_info:
            repo.create(_user())

        assert not isinstance(exc_info.value, UniqueEmailError)

    def test_update_to_taken_email_raises_unique_email(self, repo, conn):
        conn.execute.side_effect = _UniqueViolation("uq_users_email")

        with pytest.raises(UniqueEmailError):
            repo.update(_user())

    def test_update_missing_row_raises_not_found(self, repo, conn):
        conn.execute.return_value.rowcount = 0

        with pytest.raises(UserNotFoundError):
            repo.update(_user())

    def test_delete_missing_row_raises_not_found(self, repo, conn):
        conn.execute.return_value.rowcount = 0

        with pytest.raises(UserNotFoundError):
            repo.delete(_user())

    def test_password_hash_is_not_logged_on_failure(self, repo, conn, caplog):
        user = _user()
        conn.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(DatabaseError):
            repo.create(user)

        assert user.password_hash not in caplog.text


class TestReads:
    def test_query_by_id_maps_roles(self, repo, conn):
        user = _user()
        conn.execute.return_value.fetchone.return_value = _row(user)

        found = repo.query_by_id(user.id)

        assert found == user
        assert found.roles == (UserRole.USER, UserRole.ADMIN)

    def test_query_by_email_missing_raises_not_found(self, repo, conn):
        conn.execute.return_value.fetchone.return_value = None

        with pytest.raises(UserNotFoundError) as exc_info:
            repo.query_by_email("x@example.com")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    def test_unknown_role_raises_translation_error(self, repo, conn):
        row = list(_row(_user()))
        row[4] = ["SUPERUSER"]
        conn.execute.return_value.fetchone.return_value = tuple(row)

        with pytest.raises(TranslationError, match=r"^query_by_email: email\[ana@example.com\]: "):
            repo.query_by_email("ana@example.com")

    def test_translation_errors_carry_lookup_context(self, repo, conn):
        user = _user()
        row = list(_row(user))
        row[4] = ["SUPERUSER"]
        conn.execute.return_value.fetchone.return_value = tuple(row)
        conn.execute.return_value.fetchall.return_value = [tuple(row)]

        with pytest.raises(TranslationError) as by_id:
            repo.query_by_id(user.id)
        with pytest.raises(TranslationError) as by_ids:
            repo.query_by_ids([user.id])

        assert by_id.value.message.startswith(f"query_by_id: user_id[{user.id}]: ")
        assert by_ids.value.message.startswith("query_by_ids: user_ids[1]: ")
        assert by_id.value.kind is ErrorKind.TRANSLATION
        assert isinstance(by_id.value.__cause__, TranslationError)

    def test_query_by_ids_empty_skips_db(self, repo, conn):
        assert repo.query_by_ids([]) == []
        conn.execute.assert_not_called()

    def test_query_by_ids_uses_any(self, repo, conn):
        users = [_user(email=f"u{i}@example.com") for i in range(2)]
        conn.execute.return_value.fetchall.return_value = [_row(u) for u in users]

        found = repo.query_by_ids([u.id for u in users])

        assert found == users
        sql, params = conn.execute.call_args.args
        assert "id = ANY(%(ids)s)" in sql
        assert params["ids"] == [str(u.id) for u in users]


class TestTransactions:
    def test_execute_under_transaction_returns_bound_repository(self):
        pool_conn = MagicMock()
        tx_conn = MagicMock()
        repo = PostgresUserRepository(exec_context=_exec_context(pool_conn))

        tx_repo = repo.execute_under_transaction(PostgresTransaction(tx_conn))
        tx_repo.create(_user())

        assert tx_repo is not repo
        tx_conn.execute.assert_called_once()
        pool_conn.execute.assert_not_called()
