"""Connector lookup by name through discovery of the bundled connector modules."""

import importlib
import inspect
from pkgutil import walk_packages

from .._logging import get_logger
from .base_connector import Destination, Integration, Source

logger = get_logger("connectors.factory")
_CONNECTOR_PACKAGES = {
    "harness.connectors.sources": Source,
    "harness.connectors.destinations": Destination,
}


def create_connector(name: str) -> Integration:
    """Instantiate the connector registered under ``name`` (e.g. ``sqlite`` or ``parquet``)."""
    connector_name = _normalize_name(name)
    connector_class = _resolve_connector_class(connector_name)
    logger.info("Creating connector name=%s class=%s", connector_name, connector_class.__name__)
    return connector_class()


def available_connectors() -> list[str]:
    names = []
    for package_name in _CONNECTOR_PACKAGES:
        for module_name in _iter_package_modules(package_name):
            names.append(module_name.rsplit(".", 1)[-1])
    return sorted(names)


def _normalize_name(value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Connector name cannot be empty.")
    return value.strip().lower().replace("-", "_")


def _resolve_connector_class(connector_name: str) -> type[Integration]:
    for package_name, base_class in _CONNECTOR_PACKAGES.items():
        for module_name in _iter_package_modules(package_name):
            if module_name.rsplit(".", 1)[-1] != connector_name:
                continue
            connector_class = _find_connector_class(module_name, connector_name, base_class)
            if connector_class is not None:
                return connector_class

    raise ValueError(
        f"Unsupported connector '{connector_name}'. Available connectors: {', '.join(available_connectors())}"
    )


def _iter_package_modules(package_name: str) -> list[str]:
    package = importlib.import_module(package_name)
    return sorted(
        module_info.name
        for module_info in walk_packages(package.__path__, prefix=f"{package_name}.")
        if not module_info.ispkg
    )


def _find_connector_class(
    module_name: str,
    connector_name: str,
    base_class: type[Integration],
) -> type[Integration] | None:
    """Return the class named after the connector, or the first concrete subclass in the module."""
    module = importlib.import_module(module_name)
    preferred_names = {
        f"{connector_name.replace('_', '')}source",
        f"{connector_name.replace('_', '')}destination",
    }
    fallback: type[Integration] | None = None

    for _, member in inspect.getmembers(module, inspect.isclass):
        if not issubclass(member, base_class) or member is base_class or inspect.isabstract(member):
            continue
        if member.__module__ != module.__name__:
            continue

        if member.__name__.lower() in preferred_names:
            return member

        if fallback is None:
            fallback = member

    return fallback
