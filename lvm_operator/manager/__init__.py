"""Operator manager - configuration and command line entry point."""

from .config import AgentConfig, EnvNamesConfig, HostPathsConfig, OperatorConfig

__all__ = [
    "AgentConfig",
    "EnvNamesConfig",
    "HostPathsConfig",
    "OperatorConfig",
]
