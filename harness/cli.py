import argparse
import sys
from collections.abc import Sequence

from ._logging import get_logger
from .connectors.base_connector import Destination, Integration, Source
from .connectors.factory import available_connectors, create_connector
from .runner.integration_runner import IntegrationRunner

LOGGER = get_logger("cli")


def _runner_for(connector: Integration) -> IntegrationRunner:
    if isinstance(connector, Source):
        return IntegrationRunner(source=connector)
    if isinstance(connector, Destination):
        return IntegrationRunner(destination=connector)
    raise TypeError(f"{type(connector).__name__} is neither a Source nor a Destination")


def launch(connector: Integration, argv: Sequence[str] | None = None) -> None:
    """Run one command for ``connector``; meant for a connector module's ``__main__``."""
    args = sys.argv[1:] if argv is None else list(argv)
    _runner_for(connector).run(args)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Connector harness CLI")
    parser.add_argument("connector", help=f"Connector to run ({', '.join(available_connectors())})")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command and options, e.g. read --config c.json")
    args = parser.parse_args(argv)

    try:
        connector = create_connector(args.connector)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        launch(connector, args.args)
    except Exception:
        LOGGER.exception("Connector %s failed", args.connector)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
