from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Command(str, Enum):
    SPEC = "spec"
    CHECK = "check"
    DISCOVER = "discover"
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class IntegrationConfig:
    """One parsed command line: the command and the files it operates on."""

    command: Command
    config_path: Path | None = None
    catalog_path: Path | None = None
    state_path: Path | None = None

    @classmethod
    def spec(cls) -> "IntegrationConfig":
        return cls(Command.SPEC)

    @classmethod
    def check(cls, config_path: str | Path) -> "IntegrationConfig":
        return cls(Command.CHECK, config_path=Path(config_path))

    @classmethod
    def discover(cls, config_path: str | Path) -> "IntegrationConfig":
        return cls(Command.DISCOVER, config_path=Path(config_path))

    @classmethod
    def read(
        cls,
        config_path: str | Path,
        catalog_path: str | Path,
        state_path: str | Path | None = None,
    ) -> "IntegrationConfig":
        return cls(
            Command.READ,
            config_path=Path(config_path),
            catalog_path=Path(catalog_path),
            state_path=Path(state_path) if state_path is not None else None,
        )

    @classmethod
    def write(cls, config_path: str | Path, catalog_path: str | Path) -> "IntegrationConfig":
        return cls(Command.WRITE, config_path=Path(config_path), catalog_path=Path(catalog_path))

    def __str__(self) -> str:
        return (
            f"IntegrationConfig(command={getattr(self.command, 'value', self.command)}, config_path={self.config_path}, "
            f"catalog_path={self.catalog_path}, state_path={self.state_path})"
        )
