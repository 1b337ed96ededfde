"""Desired state of the vg-manager DaemonSet.

The agent runs privileged on every node selected by the aggregated
placement and needs four host paths:

- lvmd config dir (``/etc/topolvm``): where the agent writes lvmd.conf
- ``/dev``: to list block devices
- ``/run/udev``: udev database, makes lsblk output accurate
- ``/sys``: block device attributes
"""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from ..data.models import (
    AgentWorkloadSpec,
    ClusterConfig,
    Container,
    EnvVar,
    HostPathType,
    HostPathVolume,
    MountPropagationMode,
    PodTemplate,
    SecurityContext,
    VolumeMount,
)
from ..manager.config import OperatorConfig
from .placement import aggregate_placement

LVMD_CONF_VOLUME = "lvmd-conf"
DEVICE_DIR_VOLUME = "device-dir"
UDEV_VOLUME = "run-udev"
SYS_VOLUME = "sys"

# Variables set from the agent pod's own fields at pod start
AGENT_ENV_FIELDS = (
    ("NODE_NAME", "spec.nodeName"),
    ("POD_NAMESPACE", "metadata.namespace"),
    ("POD_NAME", "metadata.name"),
)


def host_volumes(config: OperatorConfig) -> Tuple[List[HostPathVolume], List[VolumeMount]]:
    """Build the host path volumes and their mounts."""
    paths = config.host_paths
    volumes = [
        HostPathVolume(LVMD_CONF_VOLUME, paths.config_dir, HostPathType.DIRECTORY_OR_CREATE),
        HostPathVolume(DEVICE_DIR_VOLUME, paths.dev_dir, HostPathType.DIRECTORY),
        HostPathVolume(UDEV_VOLUME, paths.udev_dir),
        HostPathVolume(SYS_VOLUME, paths.sys_dir),
    ]
    mounts = [
        VolumeMount(v.name, v.path, MountPropagationMode.HOST_TO_CONTAINER)
        for v in volumes
    ]
    return volumes, mounts


def agent_labels(cluster: ClusterConfig, config: OperatorConfig) -> Dict[str, str]:
    return {
        "app": config.agent.unit_name,
        config.agent.cluster_label_key: cluster.name,
    }


def build_agent_daemonset(
    cluster: ClusterConfig,
    config: OperatorConfig,
    image_provider: Callable[[], str],
) -> AgentWorkloadSpec:
    """Return the desired vg-manager DaemonSet for ``cluster``.

    Args:
        cluster: The LVMCluster being reconciled
        config: Operator configuration (names, paths, namespace)
        image_provider: Returns the agent image, e.g. an ``ImageResolver``

    Raises:
        ImageResolutionError: Propagated unchanged from ``image_provider``;
            nothing is built in that case.
    """
    placement = aggregate_placement(cluster.device_classes)
    image = image_provider()

    volumes, mounts = host_volumes(config)
    container = Container(
        name=config.agent.unit_name,
        image=image,
        command=list(config.agent.command),
        security_context=SecurityContext(privileged=True, run_as_user=0),
        volume_mounts=mounts,
        env=[EnvVar(name, path) for name, path in AGENT_ENV_FIELDS],
    )

    labels = agent_labels(cluster, config)
    template = PodTemplate(
        labels=dict(labels),
        containers=[container],
        volumes=volumes,
        # to read /proc/1/mountinfo
        host_pid=True,
        tolerations=list(placement.tolerations),
        node_selector=placement.node_selector,
        service_account_name=config.agent.service_account,
    )

    return AgentWorkloadSpec(
        name=config.agent.unit_name,
        namespace=config.namespace,
        labels=dict(labels),
        selector=dict(labels),
        template=template,
    )
