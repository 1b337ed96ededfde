"""Agent image resolution.

The agent runs the operator's own image. An explicit override wins;
otherwise the operator reads its own pod and copies the image of its
container.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from ..lookup.base import PodLookup, PodLookupError
from ..manager.config import OperatorConfig
from .errors import ContainerNotFound, MissingEnvironmentValue, SelfLookupFailed


class ImageResolver:
    """Determines the image reference of the vg-manager agent."""

    def __init__(
        self,
        config: OperatorConfig,
        lookup: Optional[PodLookup],
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config = config
        self.lookup = lookup
        self.environ = os.environ if environ is None else environ

    def resolve(self, timeout: Optional[float] = None) -> str:
        """Return the agent image.

        Args:
            timeout: Seconds allowed for the self-lookup; defaults to
                ``config.lookup_timeout``.

        Raises:
            MissingEnvironmentValue: No override and no pod name.
            SelfLookupFailed: The operator pod could not be fetched, or no
                lookup is available.
            ContainerNotFound: The operator pod has no operator container,
                or that container has no image.
        """
        env_names = self.config.env_names

        image = self.environ.get(env_names.image)
        if image:
            return image

        pod_name = self.environ.get(env_names.pod_name)
        if not pod_name:
            raise MissingEnvironmentValue(env_names.pod_name)

        namespace = self.config.namespace
        if self.lookup is None:
            raise SelfLookupFailed(pod_name, namespace)
        if timeout is None:
            timeout = self.config.lookup_timeout
        try:
            pod = self.lookup.get_pod(pod_name, namespace, timeout=timeout)
        except PodLookupError as e:
            raise SelfLookupFailed(pod_name, namespace, e) from e

        container_name = self.config.operator_container_name
        for container in pod.containers:
            if container.name == container_name:
                if not container.image:
                    break
                return container.image

        raise ContainerNotFound(container_name, pod_name)

    __call__ = resolve

    def close(self) -> None:
        """Close the underlying lookup."""
        if self.lookup is not None:
            self.lookup.close()
