from .messages import (
    Catalog,
    ConfiguredCatalog,
    ConfiguredStream,
    ConnectionStatus,
    ConnectorSpecification,
    DestinationSyncMode,
    ErrorTrace,
    FailureType,
    Log,
    LogLevel,
    ProtocolMessage,
    Record,
    State,
    Status,
    Stream,
    SyncMode,
    Trace,
    TraceType,
    Type,
)
from .serde import (
    StreamCollector,
    decode_lines,
    deserialize_message,
    split_lines,
    stdout_collector,
    to_json_line,
    try_deserialize,
)

__all__ = [
    "Catalog",
    "ConfiguredCatalog",
    "ConfiguredStream",
    "ConnectionStatus",
    "ConnectorSpecification",
    "DestinationSyncMode",
    "ErrorTrace",
    "FailureType",
    "Log",
    "LogLevel",
    "ProtocolMessage",
    "Record",
    "State",
    "Status",
    "Stream",
    "SyncMode",
    "Trace",
    "TraceType",
    "Type",
    "StreamCollector",
    "decode_lines",
    "deserialize_message",
    "split_lines",
    "stdout_collector",
    "to_json_line",
    "try_deserialize",
]
