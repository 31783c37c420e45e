"""Routes one parsed command to the connector and emits the resulting messages."""

import sys
from typing import Any, TextIO

from opentelemetry.trace import Tracer

from .._config import load_json, load_typed
from .._logging import get_logger, redact_config
from ..connectors.base_connector import Destination, OutputCollector, Source
from ..connectors.role import ConnectorRole, DestinationRole, SourceRole
from ..errors import RoleError, UnknownCommandError, ValidationError
from ..integration_config import Command, IntegrationConfig
from ..protocol import ConfiguredCatalog, ConnectionStatus, ProtocolMessage
from ..tracing import trace_span
from ..validation import SchemaValidator, validate_config
from .pipelines import read_pipeline, write_pipeline

LOGGER = get_logger("runner.dispatcher")


class CommandDispatcher:
    def __init__(
        self,
        role: ConnectorRole,
        output_collector: OutputCollector,
        validator: SchemaValidator,
        *,
        stdin: TextIO | None = None,
        tracer: Tracer | None = None,
    ):
        self.role = role
        self.integration = role.integration
        self.output_collector = output_collector
        self.validator = validator
        self.stdin = stdin
        self.tracer = tracer

    def execute(self, parsed: IntegrationConfig) -> None:
        integration_name = type(self.integration).__name__
        LOGGER.info("Running integration: %s", integration_name)
        LOGGER.info("Command: %s", getattr(parsed.command, "value", parsed.command))
        LOGGER.info("Integration config: %s", parsed)

        if parsed.command == Command.SPEC:
            self._spec()
        elif parsed.command == Command.CHECK:
            self._check(parsed)
        elif parsed.command == Command.DISCOVER:
            self._discover(parsed)
        elif parsed.command == Command.READ:
            self._read(parsed)
        elif parsed.command == Command.WRITE:
            self._write(parsed)
        else:
            raise UnknownCommandError(f"Unexpected value: {parsed.command}")

        LOGGER.info("Completed integration: %s", integration_name)

    def _spec(self) -> None:
        self.output_collector(ProtocolMessage.of_spec(self.integration.spec()))

    def _check(self, parsed: IntegrationConfig) -> None:
        config = self._load_config(parsed)
        try:
            self._validate(config, Command.CHECK)
        except ValidationError as exc:
            # reported as a failed status; the connector's own check still runs
            self.output_collector(ProtocolMessage.of_status(ConnectionStatus.failed(str(exc))))

        self.output_collector(ProtocolMessage.of_status(self.integration.check(config)))

    def _discover(self, parsed: IntegrationConfig) -> None:
        source = self._require_source(Command.DISCOVER)
        config = self._load_config(parsed)
        self._validate(config, Command.DISCOVER)
        self.output_collector(ProtocolMessage.of_catalog(source.discover(config)))

    def _read(self, parsed: IntegrationConfig) -> None:
        source = self._require_source(Command.READ)
        config = self._load_config(parsed)
        self._validate(config, Command.READ)
        catalog = self._load_catalog(parsed)
        state = load_json(parsed.state_path) if parsed.state_path is not None else None

        messages = source.read(config, catalog, state)
        with trace_span(self.tracer, "ReadSource"):
            read_pipeline(messages, self.output_collector)

    def _write(self, parsed: IntegrationConfig) -> None:
        destination = self._require_destination(Command.WRITE)
        config = self._load_config(parsed)
        self._validate(config, Command.WRITE)
        catalog = self._load_catalog(parsed)

        consumer = destination.get_consumer(config, catalog, self.output_collector)
        with trace_span(self.tracer, "WriteDestination"):
            write_pipeline(consumer, self.stdin if self.stdin is not None else sys.stdin)

    def _require_source(self, command: Command) -> Source:
        if not isinstance(self.role, SourceRole):
            raise RoleError(f"{command.value} is only supported by sources")
        return self.role.source

    def _require_destination(self, command: Command) -> Destination:
        if not isinstance(self.role, DestinationRole):
            raise RoleError(f"{command.value} is only supported by destinations")
        return self.role.destination

    def _load_config(self, parsed: IntegrationConfig) -> Any:
        if parsed.config_path is None:
            raise ValueError(f"{parsed.command.value} requires a config path")
        config = load_json(parsed.config_path)
        if isinstance(config, dict):
            LOGGER.info("Connector config: %s", redact_config(config))
        return config

    def _load_catalog(self, parsed: IntegrationConfig) -> ConfiguredCatalog:
        if parsed.catalog_path is None:
            raise ValueError(f"{parsed.command.value} requires a catalog path")
        return load_typed(parsed.catalog_path, ConfiguredCatalog)

    def _validate(self, config: Any, command: Command) -> None:
        schema = self.integration.spec().connection_specification
        validate_config(self.validator, schema, config, command.name)
