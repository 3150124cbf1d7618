"""
Unit tests for the command-line entry point.
"""
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import main
from models.exceptions import WhitelistEntryNotFoundError
from models.whitelist_models import WhitelistState


@pytest.fixture
def service():
    """Patches the service built by main() and returns the mock instance."""
    instance = MagicMock()
    instance.create = AsyncMock()
    instance.read = AsyncMock()
    instance.delete = AsyncMock()
    instance.import_state = AsyncMock()
    with patch("main.WhitelistService", return_value=instance), \
         patch("main.setup_logging"):
        yield instance


def create_state():
    return WhitelistState(id="abc123", deployment_id="d1", ip="10.0.0.0/24", description="office")


class TestBuildParser:

    def test_create_arguments(self):
        args = main.build_parser().parse_args([
            "create", "--deployment-id", "d1", "--ip", "10.0.0.0/24", "--description", "office"
        ])

        assert args.command == "create"
        assert args.deployment_id == "d1"
        assert args.ip == "10.0.0.0/24"

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            main.build_parser().parse_args([])


class TestMain:

    def test_create_prints_state(self, service, capsys):
        service.create.return_value = create_state()

        exit_code = main.main([
            "--token", "t", "create",
            "--deployment-id", "d1", "--ip", "10.0.0.0/24", "--description", "office"
        ])

        assert exit_code == 0
        service.create.assert_awaited_once_with("d1", "10.0.0.0/24", "office")
        assert json.loads(capsys.readouterr().out) == create_state().model_dump()

    def test_read_of_missing_entry_prints_null(self, service, capsys):
        service.read.return_value = None

        exit_code = main.main(["read", "--deployment-id", "d1", "--id", "abc123"])

        assert exit_code == 0
        state = service.read.await_args[0][0]
        assert state.id == "abc123"
        assert state.deployment_id == "d1"
        assert capsys.readouterr().out.strip() == "null"

    def test_delete(self, service):
        exit_code = main.main(["delete", "--deployment-id", "d1", "--id", "abc123"])

        assert exit_code == 0
        service.delete.assert_awaited_once()

    def test_import_not_found_exits_with_error(self, service, capsys):
        service.import_state.side_effect = WhitelistEntryNotFoundError("d1", "10.0.0.0/24")

        exit_code = main.main(["import", "d1@10.0.0.0/24"])

        assert exit_code == 1
        assert capsys.readouterr().out == ""
