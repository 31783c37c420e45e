"""Exception taxonomy shared by the runner, the pipelines and connectors."""

from collections.abc import Iterable


class HarnessError(Exception):
    """Base class for every error raised by the harness."""


class ConfigParseError(HarnessError, ValueError):
    """A config, catalog or state file is missing, unreadable, or has the wrong shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not parse {path}: {reason}")


class ValidationError(HarnessError):
    """A connector config does not satisfy the connector's declared schema."""

    def __init__(self, errors: Iterable[str], context: str):
        self.errors = sorted(errors)
        self.context = context
        super().__init__(f"Verification error(s) occurred for {context}. Errors: {self.errors}")


class MalformedMessageError(HarnessError, ValueError):
    """One input line could not be decoded into a protocol message."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Invalid protocol message: {reason}")


class ConnectorOperationError(HarnessError):
    """Raised by source and destination implementations when an operation fails."""


class RoleError(HarnessError, TypeError):
    """The runner was built with the wrong connector role for what it was asked to do."""


class UnknownCommandError(HarnessError):
    """The dispatcher received a command it does not know how to route."""
