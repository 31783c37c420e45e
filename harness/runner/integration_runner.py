"""Process-level entry that wraps one dispatched command in a traced run."""

from collections.abc import Sequence
from typing import TextIO

from opentelemetry.sdk.trace import TracerProvider

from .._logging import get_logger
from ..cli_parser import IntegrationCliParser
from ..connectors.base_connector import Destination, OutputCollector, Source
from ..connectors.role import connector_role
from ..integration_config import IntegrationConfig
from ..protocol import stdout_collector
from ..tracing import RunTransaction, TracingSettings, init_tracing
from ..validation import SchemaValidator
from .dispatcher import CommandDispatcher

LOGGER = get_logger("runner.integration_runner")


class IntegrationRunner:
    """Accepts either a source or a destination and runs one command against it.

    Collaborators (output sink, validator, stdin, parser) are held per instance so
    several runners can coexist in one process.
    """

    def __init__(
        self,
        source: Source | None = None,
        destination: Destination | None = None,
        *,
        output_collector: OutputCollector = stdout_collector,
        validator: SchemaValidator | None = None,
        stdin: TextIO | None = None,
        cli_parser: IntegrationCliParser | None = None,
        tracing_settings: TracingSettings | None = None,
    ):
        self.role = connector_role(source=source, destination=destination)
        self.integration = self.role.integration
        self.output_collector = output_collector
        self.validator = validator if validator is not None else SchemaValidator()
        self.stdin = stdin
        self.cli_parser = cli_parser if cli_parser is not None else IntegrationCliParser()
        self.tracing_settings = tracing_settings

    def run(self, argv: Sequence[str]) -> None:
        provider = self._init_tracing()
        parsed = self.cli_parser.parse(argv)
        self._run_traced(provider, parsed)

    def run_parsed(self, parsed: IntegrationConfig) -> None:
        self._run_traced(self._init_tracing(), parsed)

    def _init_tracing(self) -> TracerProvider:
        settings = self.tracing_settings if self.tracing_settings is not None else TracingSettings.from_env()
        return init_tracing(settings)

    def _run_traced(self, provider: TracerProvider, parsed: IntegrationConfig) -> None:
        operation = str(getattr(parsed.command, "value", parsed.command))
        transaction = RunTransaction(provider, type(self.integration).__name__, operation)
        LOGGER.info("Tracing transaction trace_id=%032x", transaction.span.get_span_context().trace_id)

        dispatcher = CommandDispatcher(
            self.role,
            self.output_collector,
            self.validator,
            stdin=self.stdin,
            tracer=transaction.tracer,
        )
        try:
            with transaction.activate():
                dispatcher.execute(parsed)
        except BaseException as exc:
            transaction.finish(ok=False, error=exc)
            raise
        transaction.finish(ok=True)
