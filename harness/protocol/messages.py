"""Protocol message envelope and payload models exchanged over stdin/stdout."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _ProtocolModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Type(str, Enum):
    SPEC = "SPEC"
    CONNECTION_STATUS = "CONNECTION_STATUS"
    CATALOG = "CATALOG"
    RECORD = "RECORD"
    STATE = "STATE"
    LOG = "LOG"
    TRACE = "TRACE"


class Status(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class SyncMode(str, Enum):
    FULL_REFRESH = "full_refresh"
    INCREMENTAL = "incremental"


class DestinationSyncMode(str, Enum):
    APPEND = "append"
    OVERWRITE = "overwrite"
    APPEND_DEDUP = "append_dedup"


class LogLevel(str, Enum):
    FATAL = "FATAL"
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"
    TRACE = "TRACE"


class TraceType(str, Enum):
    ERROR = "ERROR"


class FailureType(str, Enum):
    SYSTEM_ERROR = "system_error"
    CONFIG_ERROR = "config_error"


class ConnectorSpecification(_ProtocolModel):
    connection_specification: dict[str, Any] = Field(alias="connectionSpecification")
    documentation_url: str | None = Field(default=None, alias="documentationUrl")
    changelog_url: str | None = Field(default=None, alias="changelogUrl")
    supports_incremental: bool | None = Field(default=None, alias="supportsIncremental")
    supported_destination_sync_modes: list[DestinationSyncMode] | None = None


class ConnectionStatus(_ProtocolModel):
    status: Status
    message: str | None = None

    @classmethod
    def succeeded(cls, message: str | None = None) -> "ConnectionStatus":
        return cls(status=Status.SUCCEEDED, message=message)

    @classmethod
    def failed(cls, message: str | None = None) -> "ConnectionStatus":
        return cls(status=Status.FAILED, message=message)


class Stream(_ProtocolModel):
    name: str = Field(min_length=1)
    json_schema: dict[str, Any] = Field(default_factory=dict)
    supported_sync_modes: list[SyncMode] = Field(default_factory=lambda: [SyncMode.FULL_REFRESH])
    source_defined_cursor: bool | None = None
    default_cursor_field: list[str] | None = None
    source_defined_primary_key: list[list[str]] | None = None
    namespace: str | None = None


class Catalog(_ProtocolModel):
    streams: list[Stream] = Field(default_factory=list)


class ConfiguredStream(_ProtocolModel):
    stream: Stream
    sync_mode: SyncMode = SyncMode.FULL_REFRESH
    cursor_field: list[str] | None = None
    destination_sync_mode: DestinationSyncMode = DestinationSyncMode.APPEND
    primary_key: list[list[str]] | None = None


class ConfiguredCatalog(_ProtocolModel):
    streams: list[ConfiguredStream] = Field(default_factory=list)


class Record(_ProtocolModel):
    stream: str = Field(min_length=1)
    data: dict[str, Any]
    emitted_at: int = Field(ge=0)
    namespace: str | None = None


class State(_ProtocolModel):
    data: dict[str, Any]


class Log(_ProtocolModel):
    level: LogLevel
    message: str


class ErrorTrace(_ProtocolModel):
    message: str
    internal_message: str | None = None
    stack_trace: str | None = None
    failure_type: FailureType | None = None


class Trace(_ProtocolModel):
    type: TraceType
    emitted_at: float
    error: ErrorTrace | None = None


_PAYLOAD_FIELDS = {
    Type.SPEC: "spec",
    Type.CONNECTION_STATUS: "connection_status",
    Type.CATALOG: "catalog",
    Type.RECORD: "record",
    Type.STATE: "state",
    Type.LOG: "log",
    Type.TRACE: "trace",
}


class ProtocolMessage(_ProtocolModel):
    """Tagged union: ``type`` names which one of the payload fields is populated."""

    type: Type
    spec: ConnectorSpecification | None = None
    connection_status: ConnectionStatus | None = Field(default=None, alias="connectionStatus")
    catalog: Catalog | None = None
    record: Record | None = None
    state: State | None = None
    log: Log | None = None
    trace: Trace | None = None

    @model_validator(mode="after")
    def _payload_matches_type(self) -> "ProtocolMessage":
        field_name = _PAYLOAD_FIELDS[self.type]
        if getattr(self, field_name) is None:
            raise ValueError(f"{self.type.value} message is missing its '{field_name}' payload")
        return self

    @property
    def payload(self) -> BaseModel:
        return getattr(self, _PAYLOAD_FIELDS[self.type])

    @classmethod
    def of_spec(cls, spec: ConnectorSpecification) -> "ProtocolMessage":
        return cls(type=Type.SPEC, spec=spec)

    @classmethod
    def of_status(cls, status: ConnectionStatus) -> "ProtocolMessage":
        return cls(type=Type.CONNECTION_STATUS, connection_status=status)

    @classmethod
    def of_catalog(cls, catalog: Catalog) -> "ProtocolMessage":
        return cls(type=Type.CATALOG, catalog=catalog)

    @classmethod
    def of_record(cls, record: Record) -> "ProtocolMessage":
        return cls(type=Type.RECORD, record=record)

    @classmethod
    def of_state(cls, state: State) -> "ProtocolMessage":
        return cls(type=Type.STATE, state=state)

    @classmethod
    def of_log(cls, log: Log) -> "ProtocolMessage":
        return cls(type=Type.LOG, log=log)

    @classmethod
    def of_trace(cls, trace: Trace) -> "ProtocolMessage":
        return cls(type=Type.TRACE, trace=trace)
