from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import polars as pl
from pydantic import BaseModel, ConfigDict, Field

from ..._logging import get_logger
from ...errors import ConnectorOperationError
from ...protocol import (
    ConfiguredCatalog,
    ConnectionStatus,
    ConnectorSpecification,
    DestinationSyncMode,
    ProtocolMessage,
    Type,
)
from ..base_connector import Destination, MessageConsumer, OutputCollector

LOGGER = get_logger("destinations.parquet")

CONNECTION_SPECIFICATION = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Parquet Destination Spec",
    "type": "object",
    "required": ["destination_path"],
    "properties": {
        "destination_path": {
            "type": "string",
            "minLength": 1,
            "description": "Directory that receives one sub-directory of Parquet files per stream",
        },
    },
}


SUPPORTED_SYNC_MODES = (DestinationSyncMode.APPEND, DestinationSyncMode.OVERWRITE)


class ParquetDestinationConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    destination_path: str = Field(min_length=1)


def _safe_name(value: str) -> str:
    return value.replace("/", "_").replace(".", "_")


class ParquetConsumer(MessageConsumer):
    """Buffers records per stream and writes a Parquet file per stream on each flush.

    A STATE message is passed on to the output collector only after every record
    received before it has been written.
    """

    def __init__(self, destination_path: Path, catalog: ConfiguredCatalog, output_collector: OutputCollector):
        self.destination_path = destination_path
        self.sync_modes = {stream.stream.name: stream.destination_sync_mode for stream in catalog.streams}
        self.output_collector = output_collector
        self.buffers: dict[str, list[dict[str, Any]]] = {}
        self.written_paths: list[str] = []

    def start(self) -> None:
        unsupported = sorted(
            stream_name for stream_name, sync_mode in self.sync_modes.items() if sync_mode not in SUPPORTED_SYNC_MODES
        )
        if unsupported:
            raise ConnectorOperationError(
                f"Parquet destination supports only append and overwrite; got another sync mode for streams {unsupported}"
            )

        self.destination_path.mkdir(parents=True, exist_ok=True)
        for stream_name, sync_mode in self.sync_modes.items():
            stream_dir = self._stream_dir(stream_name)
            if sync_mode == DestinationSyncMode.OVERWRITE and stream_dir.exists():
                for existing in stream_dir.glob("*.parquet"):
                    existing.unlink()
                LOGGER.info("Cleared existing Parquet files for stream=%s", stream_name)

    def accept(self, message: ProtocolMessage) -> None:
        if message.type == Type.RECORD:
            record = message.record
            if record.stream not in self.sync_modes:
                LOGGER.warning("Skipping record for stream not in catalog: %s", record.stream)
                return
            row = dict(record.data)
            row["_emitted_at"] = record.emitted_at
            self.buffers.setdefault(record.stream, []).append(row)
        elif message.type == Type.STATE:
            self._flush()
            self.output_collector(message)

    def close(self) -> None:
        self._flush()
        LOGGER.info("Parquet consumer closed after writing %s files", len(self.written_paths))

    def _stream_dir(self, stream_name: str) -> Path:
        return self.destination_path / _safe_name(stream_name)

    def _flush(self) -> None:
        for stream_name, rows in self.buffers.items():
            if not rows:
                continue

            stream_dir = self._stream_dir(stream_name)
            stream_dir.mkdir(parents=True, exist_ok=True)
            file_timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
            target_path = stream_dir / f"{_safe_name(stream_name)}_{file_timestamp}_{len(self.written_paths)}.parquet"

            frame = pl.DataFrame(rows, infer_schema_length=None)
            frame.write_parquet(target_path)
            self.written_paths.append(str(target_path))
            LOGGER.info("Parquet written for stream=%s rows=%s path=%s", stream_name, frame.height, target_path)

        self.buffers.clear()


class ParquetDestination(Destination):
    def spec(self) -> ConnectorSpecification:
        return ConnectorSpecification(
            connection_specification=CONNECTION_SPECIFICATION,
            documentation_url="https://parquet.apache.org/docs/",
            supported_destination_sync_modes=list(SUPPORTED_SYNC_MODES),
        )

    def check(self, config: dict[str, Any]) -> ConnectionStatus:
        try:
            destination_config = ParquetDestinationConfig.model_validate(config)
        except ValueError as exc:
            return ConnectionStatus.failed(f"Invalid destination config: {exc}")

        destination_path = Path(destination_config.destination_path)
        marker = destination_path / "_check"
        try:
            destination_path.mkdir(parents=True, exist_ok=True)
            marker.write_text("ok", encoding="utf-8")
            marker.unlink()
        except OSError as exc:
            LOGGER.exception("Parquet destination path is not writable")
            return ConnectionStatus.failed(f"Could not write to {destination_path}: {exc}")
        return ConnectionStatus.succeeded()

    def get_consumer(
        self,
        config: dict[str, Any],
        catalog: ConfiguredCatalog,
        output_collector: OutputCollector,
    ) -> MessageConsumer:
        destination_config = ParquetDestinationConfig.model_validate(config)
        return ParquetConsumer(Path(destination_config.destination_path), catalog, output_collector)
