"""JSON Lines encoding and line-stream decoding helpers for protocol messages."""

import re
import sys
from collections.abc import Callable, Iterable, Iterator
from typing import TextIO, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..errors import MalformedMessageError
from .messages import ProtocolMessage

T = TypeVar("T")

_LINE_BREAKS = re.compile(r"[\r\n]+")


def to_json_line(message: ProtocolMessage) -> str:
    """Serialize one message as a single JSON object with no line breaks."""
    return message.model_dump_json(by_alias=True, exclude_none=True)


def deserialize_message(text: str) -> ProtocolMessage:
    """Decode one JSON line into a protocol message or raise MalformedMessageError."""
    try:
        return ProtocolMessage.model_validate_json(text)
    except PydanticValidationError as exc:
        reason = "; ".join(error["msg"] for error in exc.errors()) or str(exc)
        raise MalformedMessageError(text, reason) from exc


def try_deserialize(text: str) -> ProtocolMessage | None:
    try:
        return deserialize_message(text)
    except MalformedMessageError:
        return None


def split_lines(stream: TextIO) -> Iterator[str]:
    """Yield chunks of ``stream`` separated by one or more CR/LF characters.

    Only carriage returns and line feeds delimit lines; other whitespace is kept
    as part of the line. Empty segments are never produced.
    """
    pending = ""
    # readline returns as soon as a line is available on a pipe
    for chunk in iter(stream.readline, ""):
        pending += chunk
        parts = _LINE_BREAKS.split(pending)
        pending = parts.pop()
        for part in parts:
            if part:
                yield part

    if pending:
        yield pending


def decode_lines(
    lines: Iterable[str],
    decode: Callable[[str], T],
    on_error: Callable[[str, MalformedMessageError], None],
) -> Iterator[T]:
    """Map ``decode`` over ``lines``, dropping lines it rejects.

    A line rejected with MalformedMessageError is reported to ``on_error`` and
    skipped; any other exception propagates.
    """
    for line in lines:
        try:
            item = decode(line)
        except MalformedMessageError as exc:
            on_error(line, exc)
            continue
        yield item


class StreamCollector:
    """Output sink writing each message as one JSON line to a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self, message: ProtocolMessage) -> None:
        self.stream.write(to_json_line(message) + "\n")
        self.stream.flush()


def stdout_collector(message: ProtocolMessage) -> None:
    StreamCollector(sys.stdout)(message)
