from .base_connector import Destination, Integration, MessageConsumer, MessageIterator, OutputCollector, Source
from .factory import available_connectors, create_connector
from .role import ConnectorRole, DestinationRole, SourceRole, connector_role

__all__ = [
    "ConnectorRole",
    "Destination",
    "DestinationRole",
    "Integration",
    "MessageConsumer",
    "MessageIterator",
    "OutputCollector",
    "Source",
    "SourceRole",
    "available_connectors",
    "connector_role",
    "create_connector",
]
