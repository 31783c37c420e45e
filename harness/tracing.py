"""OpenTelemetry tracing for a single connector run."""

import os
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON
from opentelemetry.trace import Status, StatusCode, Tracer

from ._logging import get_logger

LOGGER = get_logger("tracing")

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TracingSettings:
    application: str = "unknown"
    version: str = "unknown"
    enabled: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "TracingSettings":
        env = os.environ if env is None else env
        return cls(
            application=env.get("APPLICATION", "unknown"),
            version=env.get("APPLICATION_VERSION", "unknown"),
            enabled=env.get("ENABLE_TRACING", "false").strip().lower() in _TRUE_VALUES,
        )


def init_tracing(settings: TracingSettings) -> TracerProvider:
    """Build a tracer provider for one run; spans are only exported when enabled."""
    resource = Resource.create(
        {
            "service.name": settings.application,
            "service.version": settings.version,
            "connector": settings.application,
            "connector_version": settings.version,
        }
    )
    provider = TracerProvider(resource=resource, sampler=ALWAYS_ON if settings.enabled else ALWAYS_OFF)
    if settings.enabled:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    LOGGER.info(
        "Tracing initialized release=%s@%s enabled=%s",
        settings.application,
        settings.version,
        settings.enabled,
    )
    return provider


class RunTransaction:
    """Root span of a run whose ``finish`` may be called any number of times."""

    def __init__(self, provider: TracerProvider, name: str, operation: str):
        self.provider = provider
        self.tracer: Tracer = provider.get_tracer("harness")
        self.span = self.tracer.start_span(name, attributes={"operation": operation})
        self.finished = False

    @contextmanager
    def activate(self) -> Iterator[None]:
        with trace.use_span(self.span, end_on_exit=False):
            yield

    def finish(self, ok: bool = True, error: BaseException | None = None) -> None:
        if self.finished:
            return
        self.finished = True

        if error is not None:
            self.span.record_exception(error)
            self.span.set_status(Status(StatusCode.ERROR, str(error)))
        elif ok:
            self.span.set_status(Status(StatusCode.OK))
        else:
            self.span.set_status(Status(StatusCode.ERROR))

        self.span.end()
        self.provider.force_flush()


@contextmanager
def trace_span(tracer: Tracer | None, name: str) -> Iterator[None]:
    """Child span around a pipeline step; a no-op without a tracer."""
    if tracer is None:
        yield
        return

    with tracer.start_as_current_span(name):
        yield
