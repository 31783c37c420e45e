"""Process harness that runs connector sources and destinations over the JSON Lines protocol."""

from .connectors import Destination, MessageConsumer, MessageIterator, Source, create_connector
from .errors import (
    ConfigParseError,
    ConnectorOperationError,
    HarnessError,
    MalformedMessageError,
    RoleError,
    UnknownCommandError,
    ValidationError,
)
from .integration_config import Command, IntegrationConfig
from .runner import IntegrationRunner

__all__ = [
    "Command",
    "ConfigParseError",
    "ConnectorOperationError",
    "Destination",
    "HarnessError",
    "IntegrationConfig",
    "IntegrationRunner",
    "MalformedMessageError",
    "MessageConsumer",
    "MessageIterator",
    "RoleError",
    "Source",
    "UnknownCommandError",
    "ValidationError",
    "create_connector",
]
