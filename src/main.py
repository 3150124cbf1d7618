import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from api.compose_gateway import ComposeGateway
from config import load_settings
from models.exceptions import ComposeError
from models.whitelist_models import WhitelistState
from services.whitelist_service import WhitelistService
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage IP whitelist entries of Compose deployments.")
    parser.add_argument("--token", default=None, help="Compose API token. Overrides ACCESS_TOKEN.")
    parser.add_argument("--log-folder", default=None, help="Folder for rotating log files.")
    parser.add_argument("--verbose", action="store_true", help="Log every poll on the console.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Add an entry and wait until it is listed.")
    create.add_argument("--deployment-id", required=True)
    create.add_argument("--ip", required=True, help="Network in CIDR notation, e.g. 10.0.0.0/24.")
    create.add_argument("--description", required=True)

    read = subparsers.add_parser("read", help="Print the current state of an entry.")
    read.add_argument("--deployment-id", required=True)
    read.add_argument("--id", required=True)

    delete = subparsers.add_parser("delete", help="Remove an entry and wait until it is gone.")
    delete.add_argument("--deployment-id", required=True)
    delete.add_argument("--id", required=True)

    import_parser = subparsers.add_parser("import", help="Adopt an existing entry.")
    import_parser.add_argument("import_id", help="<deployment>@<ip>")

    return parser


def _state_from_args(args: argparse.Namespace) -> WhitelistState:
    return WhitelistState(id=args.id, deployment_id=args.deployment_id, ip="", description="")


async def run_command(args: argparse.Namespace, service: WhitelistService) -> Optional[WhitelistState]:
    """Dispatches one parsed sub-command to the service."""
    if args.command == "create":
        return await service.create(args.deployment_id, args.ip, args.description)
    if args.command == "read":
        return await service.read(_state_from_args(args))
    if args.command == "delete":
        await service.delete(_state_from_args(args))
        return None
    if args.command == "import":
        return await service.import_state(args.import_id)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    setup_logging(args.log_folder or settings.log_folder, verbose=args.verbose)

    gateway = ComposeGateway(settings.api, args.token or settings.access_token)
    service = WhitelistService(gateway, settings.reconciliation)

    try:
        state = asyncio.run(run_command(args, service))
    except (ComposeError, ValidationError) as e:
        logger.error(f"Falha ao executar '{args.command}': {e}")
        return 1

    print(state.model_dump_json() if state is not None else "null")
    return 0


if __name__ == "__main__":
    sys.exit(main())
