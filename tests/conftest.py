"""Pytest configuration and shared fixtures."""

from typing import Dict, List, Optional, Tuple

import pytest

from lvm_operator.data.models import ContainerInfo, Pod
from lvm_operator.lookup.base import PodLookup, PodLookupError
from lvm_operator.manager.config import OperatorConfig


class FakePodLookup(PodLookup):
    """In-memory pod lookup that records every call."""

    def __init__(self, pods: Optional[Dict[Tuple[str, str], Pod]] = None, error: Optional[Exception] = None):
        self.pods = pods or {}
        self.error = error
        self.calls: List[Tuple[str, str, Optional[float]]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    def close(self) -> None:
        self.closed = True

    def get_pod(self, name: str, namespace: str, timeout: Optional[float] = None) -> Pod:
        self.calls.append((name, namespace, timeout))
        if self.error is not None:
            raise self.error
        try:
            return self.pods[(namespace, name)]
        except KeyError:
            raise PodLookupError(self.name, f"pod {namespace}/{name} not found")


@pytest.fixture
def operator_config():
    return OperatorConfig(namespace="openshift-storage")


@pytest.fixture
def operator_pod():
    """The running operator pod, with a sidecar next to the manager."""
    return Pod(
        name="op-123",
        namespace="openshift-storage",
        containers=(
            ContainerInfo(name="kube-rbac-proxy", image="registry/proxy:v1"),
            ContainerInfo(name="manager", image="registry/x:tag"),
        ),
    )


@pytest.fixture
def fake_lookup(operator_pod):
    return FakePodLookup({("openshift-storage", "op-123"): operator_pod})


@pytest.fixture
def sample_lvmcluster_yaml():
    """LVMCluster with one unrestricted and one restricted device class."""
    return '''
apiVersion: lvm.topolvm.io/v1alpha1
kind: LVMCluster
metadata:
  name: my-lvmcluster
  namespace: openshift-storage
spec:
  storage:
    deviceClasses:
      - name: vg1
        default: true
        tolerations:
          - key: storage
            operator: Exists
            effect: NoSchedule
      - name: vg2
        nodeSelector:
          nodeSelectorTerms:
            - matchExpressions:
                - key: kubernetes.io/hostname
                  operator: In
                  values:
                    - worker-0
                    - worker-1
        tolerations:
          - key: storage
            operator: Exists
            effect: NoSchedule
          - key: dedicated
            operator: Equal
            value: lvm
            effect: NoExecute
            tolerationSeconds: 300
'''


@pytest.fixture
def sample_pod_json():
    """Pod object as returned by the API server."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "op-123", "namespace": "openshift-storage"},
        "spec": {
            "containers": [
                {"name": "kube-rbac-proxy", "image": "registry/proxy:v1"},
                {"name": "manager", "image": "registry/x:tag", "command": ["/manager"]},
            ]
        },
    }


@pytest.fixture
def lookup_factory():
    """Build a FakePodLookup with custom pods or a failure."""
    return FakePodLookup
