"""The runner drives exactly one connector, either a source or a destination."""

from dataclasses import dataclass

from ..errors import RoleError
from .base_connector import Destination, Integration, Source


@dataclass(frozen=True)
class SourceRole:
    source: Source

    @property
    def integration(self) -> Integration:
        return self.source


@dataclass(frozen=True)
class DestinationRole:
    destination: Destination

    @property
    def integration(self) -> Integration:
        return self.destination


ConnectorRole = SourceRole | DestinationRole


def connector_role(source: Source | None = None, destination: Destination | None = None) -> ConnectorRole:
    """Wrap whichever connector was supplied; exactly one must be."""
    if (source is None) == (destination is None):
        raise RoleError("can only pass in a destination or a source")

    if source is not None:
        if not isinstance(source, Source):
            raise RoleError(f"{type(source).__name__} does not implement Source")
        return SourceRole(source)

    if not isinstance(destination, Destination):
        raise RoleError(f"{type(destination).__name__} does not implement Destination")
    return DestinationRole(destination)
