"""Tests for the salsila CLI."""

import pytest
from typer.testing import CliRunner

from src.dev.cli import app, db_commands, utils
from src.salsila.core.services import DbSessionService

runner = CliRunner()


@pytest.fixture
def cli_db(monkeypatch, memory_db_config, password_hasher):
    """Point the CLI at a fresh in-memory database."""
    service = DbSessionService(memory_db_config)
    monkeypatch.setattr(utils, "get_db_service", lambda: service)
    monkeypatch.setattr(db_commands, "get_db_service", lambda: service)
    monkeypatch.setattr(utils, "get_password_hasher", lambda: password_hasher)

    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0, result.output
    yield service
    service.dispose()


def _add(email="ana@example.com", password="secret1", role_id="1"):
    return runner.invoke(
        app, ["users", "add", email, "--role-id", role_id, "--password", password]
    )


def _only_uid() -> str:
    with utils.user_service_scope() as users:
        return users.get_all_users()[0].uid


class TestDbCommands:
    def test_init_reports_tables(self, cli_db):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert "users" in result.output

    def test_status(self, cli_db):
        result = runner.invoke(app, ["db", "status"])

        assert result.exit_code == 0
        assert "Database is healthy" in result.output


class TestUserCommands:
    def test_add_and_list(self, cli_db):
        added = _add()
        listed = runner.invoke(app, ["users", "list"])

        assert added.exit_code == 0, added.output
        assert "created successfully" in added.output
        assert listed.exit_code == 0
        assert "ana@example.com" in listed.output
        assert "Showing 1 users" in listed.output

    def test_list_empty(self, cli_db):
        result = runner.invoke(app, ["users", "list"])

        assert result.exit_code == 0
        assert "No users found" in result.output

    def test_add_rejects_short_password(self, cli_db):
        result = _add(password="abc")

        assert result.exit_code == 1
        assert "at least 5 characters" in result.output

    def test_add_rejects_duplicate_email(self, cli_db):
        _add()
        result = _add()

        assert result.exit_code == 1
        assert "already in use" in result.output

    def test_add_rejects_missing_role(self, cli_db):
        result = _add(role_id="0")

        assert result.exit_code == 1
        assert "Role is required" in result.output

    def test_attach_person(self, cli_db):
        _add()
        uid = _only_uid()

        result = runner.invoke(app, ["users", "attach-person", uid, "p-1"])

        assert result.exit_code == 0, result.output
        with utils.user_service_scope() as users:
            assert users.get_user_by_uid(uid).person_uid == "p-1"

    def test_attach_person_unknown_user(self, cli_db):
        result = runner.invoke(app, ["users", "attach-person", "nobody", "p-1"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_with_force(self, cli_db):
        _add()
        uid = _only_uid()

        result = runner.invoke(app, ["users", "delete", uid, "--force"])

        assert result.exit_code == 0, result.output
        assert "No users found" in runner.invoke(app, ["users", "list"]).output

    def test_delete_cancelled(self, cli_db):
        _add()
        uid = _only_uid()

        result = runner.invoke(app, ["users", "delete", uid], input="n\n")

        assert result.exit_code == 0
        assert "Operation cancelled" in result.output
        assert "Showing 1 users" in runner.invoke(app, ["users", "list"]).output


class TestServe:
    def test_serve_runs_uvicorn_with_overrides(self, monkeypatch):
        calls = {}

        def fake_run(target, **kwargs):
            calls["target"] = target
            calls.update(kwargs)

        monkeypatch.setattr("uvicorn.run", fake_run)

        result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "9001"])

        assert result.exit_code == 0, result.output
        assert calls["target"] == "src.salsila.api.http.app:app"
        assert calls["host"] == "0.0.0.0"
        assert calls["port"] == 9001
        assert calls["reload"] is False
