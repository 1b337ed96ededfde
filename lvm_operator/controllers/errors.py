"""Errors raised while computing the agent DaemonSet."""

from typing import Optional


class ImageResolutionError(Exception):
    """Base class for failures to determine the agent image.

    ``retryable`` tells the reconcile loop whether trying again without
    changing the deployment can help.
    """

    retryable = False


class MissingEnvironmentValue(ImageResolutionError):
    """A required environment variable is absent or empty."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"failed to get {variable} env variable")


class SelfLookupFailed(ImageResolutionError):
    """The operator's own pod could not be fetched."""

    retryable = True

    def __init__(self, pod_name: str, namespace: str, cause: Optional[Exception] = None):
        self.pod_name = pod_name
        self.namespace = namespace
        self.cause = cause
        message = f"failed to get pod {pod_name} in namespace {namespace}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ContainerNotFound(ImageResolutionError):
    """The operator container is not part of the operator's pod."""

    def __init__(self, container_name: str, pod_name: str):
        self.container_name = container_name
        self.pod_name = pod_name
        super().__init__(f"failed to get container image for {container_name} in pod {pod_name}")
