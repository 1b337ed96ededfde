"""Configuration management for the LVM operator.

Supports YAML-based configuration with environment overrides. The loaded
configuration is immutable and passed explicitly to the builder and the
image resolver.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_NAMESPACE = "openshift-storage"


@dataclass(frozen=True)
class HostPathsConfig:
    """Host paths mounted into the agent."""

    config_dir: str = "/etc/topolvm"  # lvmd.conf lives here
    dev_dir: str = "/dev"
    udev_dir: str = "/run/udev"
    sys_dir: str = "/sys"


@dataclass(frozen=True)
class AgentConfig:
    """The per-node vg-manager agent."""

    unit_name: str = "vg-manager"
    service_account: str = "vg-manager"
    command: Tuple[str, ...] = ("/vgmanager",)
    cluster_label_key: str = "topolvm.io/lvmcluster"


@dataclass(frozen=True)
class EnvNamesConfig:
    """Names of the environment variables the operator reads."""

    image: str = "AGENT_IMAGE"
    pod_name: str = "POD_NAME"
    pod_namespace: str = "POD_NAMESPACE"


@dataclass(frozen=True)
class OperatorConfig:
    """Main configuration container."""

    namespace: str = DEFAULT_NAMESPACE
    operator_container_name: str = "manager"
    lookup_timeout: int = 10  # seconds

    agent: AgentConfig = field(default_factory=AgentConfig)
    host_paths: HostPathsConfig = field(default_factory=HostPathsConfig)
    env_names: EnvNamesConfig = field(default_factory=EnvNamesConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OperatorConfig":
        """Create config from dictionary."""
        # Parse agent config
        agent_data = data.get("agent", {})
        agent = AgentConfig(
            unit_name=agent_data.get("unit_name", "vg-manager"),
            service_account=agent_data.get("service_account", "vg-manager"),
            command=tuple(agent_data.get("command", ["/vgmanager"])),
            cluster_label_key=agent_data.get("cluster_label_key", "topolvm.io/lvmcluster"),
        )

        # Parse host paths
        paths_data = data.get("host_paths", {})
        host_paths = HostPathsConfig(
            config_dir=paths_data.get("config_dir", "/etc/topolvm"),
            dev_dir=paths_data.get("dev_dir", "/dev"),
            udev_dir=paths_data.get("udev_dir", "/run/udev"),
            sys_dir=paths_data.get("sys_dir", "/sys"),
        )

        env_data = data.get("env", {})
        env_names = EnvNamesConfig(
            image=env_data.get("image", "AGENT_IMAGE"),
            pod_name=env_data.get("pod_name", "POD_NAME"),
            pod_namespace=env_data.get("pod_namespace", "POD_NAMESPACE"),
        )

        return cls(
            namespace=data.get("namespace", DEFAULT_NAMESPACE),
            operator_container_name=data.get("operator_container_name", "manager"),
            lookup_timeout=data.get("lookup_timeout", 10),
            agent=agent,
            host_paths=host_paths,
            env_names=env_names,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "OperatorConfig":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "OperatorConfig":
        """Load config from path or defaults, then apply the environment.

        Checks in order:
        1. Provided path
        2. LVM_OPERATOR_CONFIG env var
        3. ./configs/operator.yaml
        4. ./operator.yaml
        5. Default config

        The operator namespace is taken from the pod namespace variable
        when it is set.
        """
        environ = os.environ if environ is None else environ
        paths_to_try = []

        if config_path:
            paths_to_try.append(Path(config_path))

        if env_path := environ.get("LVM_OPERATOR_CONFIG"):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path("./configs/operator.yaml"),
            Path("./operator.yaml"),
        ])

        config = cls()
        for path in paths_to_try:
            if path.exists():
                config = cls.from_yaml(path)
                break

        return config.with_environment(environ)

    def with_environment(self, environ: Dict[str, str]) -> "OperatorConfig":
        """Return a copy scoped to the namespace named in the environment."""
        namespace = environ.get(self.env_names.pod_namespace)
        if namespace:
            return replace(self, namespace=namespace)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "namespace": self.namespace,
            "operator_container_name": self.operator_container_name,
            "lookup_timeout": self.lookup_timeout,
            "agent": {
                "unit_name": self.agent.unit_name,
                "service_account": self.agent.service_account,
                "command": list(self.agent.command),
                "cluster_label_key": self.agent.cluster_label_key,
            },
            "host_paths": {
                "config_dir": self.host_paths.config_dir,
                "dev_dir": self.host_paths.dev_dir,
                "udev_dir": self.host_paths.udev_dir,
                "sys_dir": self.host_paths.sys_dir,
            },
            "env": {
                "image": self.env_names.image,
                "pod_name": self.env_names.pod_name,
                "pod_namespace": self.env_names.pod_namespace,
            },
        }
