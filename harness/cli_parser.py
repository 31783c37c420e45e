import argparse
from collections.abc import Sequence

from .integration_config import Command, IntegrationConfig


class IntegrationCliParser:
    """Turns connector argv (``read --config c.json --catalog cat.json``) into an IntegrationConfig."""

    def __init__(self, prog: str | None = None):
        self.parser = self._build_parser(prog)

    @staticmethod
    def _build_parser(prog: str | None) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog=prog, description="Run a connector command")
        subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

        subparsers.add_parser(Command.SPEC.value, help="Print the connector specification")

        check_parser = subparsers.add_parser(Command.CHECK.value, help="Check the connection config")
        check_parser.add_argument("--config", required=True, help="Path to the connector config JSON")

        discover_parser = subparsers.add_parser(Command.DISCOVER.value, help="Print the source catalog")
        discover_parser.add_argument("--config", required=True, help="Path to the connector config JSON")

        read_parser = subparsers.add_parser(Command.READ.value, help="Read records from the source")
        read_parser.add_argument("--config", required=True, help="Path to the connector config JSON")
        read_parser.add_argument("--catalog", required=True, help="Path to the configured catalog JSON")
        read_parser.add_argument("--state", help="Path to the state JSON from a previous run")

        write_parser = subparsers.add_parser(Command.WRITE.value, help="Write stdin messages to the destination")
        write_parser.add_argument("--config", required=True, help="Path to the connector config JSON")
        write_parser.add_argument("--catalog", required=True, help="Path to the configured catalog JSON")

        return parser

    def parse(self, argv: Sequence[str]) -> IntegrationConfig:
        args = self.parser.parse_args(list(argv))
        command = Command(args.command)

        if command == Command.SPEC:
            return IntegrationConfig.spec()
        if command == Command.CHECK:
            return IntegrationConfig.check(args.config)
        if command == Command.DISCOVER:
            return IntegrationConfig.discover(args.config)
        if command == Command.READ:
            return IntegrationConfig.read(args.config, args.catalog, args.state)
        return IntegrationConfig.write(args.config, args.catalog)
