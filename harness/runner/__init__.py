from .dispatcher import CommandDispatcher
from .integration_runner import IntegrationRunner
from .pipelines import read_pipeline, write_pipeline

__all__ = ["CommandDispatcher", "IntegrationRunner", "read_pipeline", "write_pipeline"]
