import time
from collections.abc import Iterator
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Boolean, Date, DateTime, Float, Integer, MetaData, Numeric, Table, asc, create_engine, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from ..._logging import get_logger, redact_config
from ...errors import ConnectorOperationError
from ...protocol import (
    Catalog,
    ConfiguredCatalog,
    ConfiguredStream,
    ConnectionStatus,
    ConnectorSpecification,
    Log,
    LogLevel,
    ProtocolMessage,
    Record,
    State,
    Stream,
    SyncMode,
)
from ..base_connector import MessageIterator, Source

LOGGER = get_logger("sources.sqlite")

CONNECTION_SPECIFICATION = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "SQLite Source Spec",
    "type": "object",
    "required": ["database_path"],
    "properties": {
        "database_path": {
            "type": "string",
            "minLength": 1,
            "description": "Path to the SQLite database file, or :memory:",
        },
        "tables": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Restrict discovery to these tables",
        },
    },
}


class SQLiteSourceConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    database_path: str = Field(min_length=1)
    tables: list[str] | None = None


def _build_sqlite_url(database_path: str) -> str:
    if database_path == ":memory:":
        return "sqlite+pysqlite:///:memory:"

    resolved_path = Path(database_path).expanduser().resolve()
    return f"sqlite+pysqlite:///{resolved_path}"


def _json_type(column_type: Any) -> str:
    if isinstance(column_type, Boolean):
        return "boolean"
    if isinstance(column_type, Integer):
        return "integer"
    if isinstance(column_type, (Float, Numeric)):
        return "number"
    return "string"


def _json_safe(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.hex()
    return value


def _cursor_value(column: Any, value: Any) -> Any:
    """Turn a cursor read back from state into a value comparable with ``column``."""
    if isinstance(value, str):
        if isinstance(column.type, DateTime):
            return datetime.fromisoformat(value)
        if isinstance(column.type, Date):
            return date.fromisoformat(value)
    return value


class SQLiteSource(Source):
    """Reads whole tables, or rows past a cursor column for incremental streams."""

    def spec(self) -> ConnectorSpecification:
        return ConnectorSpecification(
            connection_specification=CONNECTION_SPECIFICATION,
            documentation_url="https://www.sqlite.org/docs.html",
            supports_incremental=True,
        )

    def check(self, config: dict[str, Any]) -> ConnectionStatus:
        engine = None
        try:
            engine = self._create_engine(config)
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return ConnectionStatus.succeeded()
        except (SQLAlchemyError, ValueError) as exc:
            LOGGER.exception("SQLite connection test failed")
            return ConnectionStatus.failed(f"Could not connect to SQLite database: {exc}")
        finally:
            if engine is not None:
                engine.dispose()

    def discover(self, config: dict[str, Any]) -> Catalog:
        source_config = SQLiteSourceConfig.model_validate(config)
        engine = self._create_engine(config)
        try:
            inspector = inspect(engine)
            table_names = inspector.get_table_names()
            if source_config.tables is not None:
                table_names = [name for name in table_names if name in source_config.tables]

            streams = []
            for table_name in table_names:
                properties = {}
                for column in inspector.get_columns(table_name):
                    json_type = _json_type(column["type"])
                    properties[column["name"]] = {"type": [json_type, "null"] if column.get("nullable", True) else json_type}

                primary_key = inspector.get_pk_constraint(table_name).get("constrained_columns") or []
                streams.append(
                    Stream(
                        name=table_name,
                        json_schema={"type": "object", "properties": properties},
                        supported_sync_modes=[SyncMode.FULL_REFRESH, SyncMode.INCREMENTAL],
                        source_defined_cursor=False,
                        source_defined_primary_key=[[column] for column in primary_key] or None,
                    )
                )
        finally:
            engine.dispose()

        LOGGER.info("Discovered %s SQLite tables", len(streams))
        return Catalog(streams=streams)

    def read(
        self,
        config: dict[str, Any],
        catalog: ConfiguredCatalog,
        state: Any | None,
    ) -> MessageIterator:
        engine = self._create_engine(config)
        cursors = dict(state) if isinstance(state, dict) else {}
        return MessageIterator(self._read_streams(engine, catalog, cursors), on_close=engine.dispose)

    def _create_engine(self, config: dict[str, Any]) -> Engine:
        source_config = SQLiteSourceConfig.model_validate(config)
        LOGGER.info("Creating SQLite engine with config=%s", redact_config(source_config.model_dump()))
        return create_engine(_build_sqlite_url(source_config.database_path))

    def _read_streams(
        self,
        engine: Engine,
        catalog: ConfiguredCatalog,
        cursors: dict[str, Any],
    ) -> Iterator[ProtocolMessage]:
        incremental = False
        with engine.connect() as connection:
            for configured_stream in catalog.streams:
                stream_name = configured_stream.stream.name
                try:
                    table = Table(stream_name, MetaData(), autoload_with=connection)
                except NoSuchTableError as exc:
                    raise ConnectorOperationError(f"Table '{stream_name}' does not exist") from exc

                cursor_column = self._cursor_column(configured_stream, table)
                statement = select(table)
                if cursor_column is not None:
                    incremental = True
                    statement = statement.order_by(asc(table.c[cursor_column]))
                    last_cursor = self._last_cursor(cursors, stream_name)
                    if last_cursor is not None:
                        column = table.c[cursor_column]
                        statement = statement.where(column > _cursor_value(column, last_cursor))

                count = 0
                for row in connection.execute(statement):
                    data = {key: _json_safe(value) for key, value in row._mapping.items()}
                    if cursor_column is not None and data.get(cursor_column) is not None:
                        cursors[stream_name] = {"cursor_field": cursor_column, "cursor": data[cursor_column]}
                    count += 1
                    yield ProtocolMessage.of_record(
                        Record(stream=stream_name, data=data, emitted_at=int(time.time() * 1000))
                    )

                LOGGER.info("Read %s rows from table=%s", count, stream_name)
                yield ProtocolMessage.of_log(Log(level=LogLevel.INFO, message=f"Read {count} records from {stream_name}"))

        if incremental:
            yield ProtocolMessage.of_state(State(data=cursors))

    @staticmethod
    def _last_cursor(cursors: dict[str, Any], stream_name: str) -> Any:
        stream_state = cursors.get(stream_name)
        if stream_state is None:
            return None
        if not isinstance(stream_state, dict):
            raise ConnectorOperationError(
                f"State for stream '{stream_name}' must be an object with a 'cursor' key, got {stream_state!r}"
            )
        return stream_state.get("cursor")

    @staticmethod
    def _cursor_column(configured_stream: ConfiguredStream, table: Table) -> str | None:
        if configured_stream.sync_mode != SyncMode.INCREMENTAL:
            return None
        if not configured_stream.cursor_field:
            raise ConnectorOperationError(
                f"Incremental stream '{configured_stream.stream.name}' needs a cursor_field"
            )

        cursor_column = configured_stream.cursor_field[0]
        if cursor_column not in table.c:
            raise ConnectorOperationError(
                f"cursor column '{cursor_column}' not found in table '{configured_stream.stream.name}'"
            )
        return cursor_column
