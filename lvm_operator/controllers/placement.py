"""Placement aggregation across device classes.

Each device class of an LVMCluster carries its own node selector and
tolerations. The vg-manager DaemonSet is a single workload, so it gets one
placement that covers every device class:

- node selection: unrestricted as soon as one class is unrestricted,
  otherwise the terms of all classes ORed together
- tolerations: union of all classes, exact duplicates removed
"""

from __future__ import annotations

from typing import Iterable, List

from ..data.models import AggregatedPlacement, DeviceClass, NodeSelector, NodeSelectorTerm, Toleration


def merge_tolerations(device_classes: Iterable[DeviceClass]) -> List[Toleration]:
    """Union of all tolerations in order of first appearance."""
    seen = set()
    merged: List[Toleration] = []
    for device_class in device_classes:
        for toleration in device_class.tolerations:
            if toleration in seen:
                continue
            seen.add(toleration)
            merged.append(toleration)
    return merged


def aggregate_placement(device_classes: Iterable[DeviceClass]) -> AggregatedPlacement:
    """Merge the placement constraints of ``device_classes``.

    Returns:
        AggregatedPlacement whose node selector is None when any class
        (or no class at all) leaves node selection unset.
    """
    device_classes = list(device_classes)
    terms: List[NodeSelectorTerm] = []
    match_all_nodes = False

    for device_class in device_classes:
        selector = device_class.node_selector
        if selector is None or selector.is_empty:
            match_all_nodes = True
        else:
            terms.extend(selector.node_selector_terms)

    node_selector = None
    if terms and not match_all_nodes:
        node_selector = NodeSelector(node_selector_terms=tuple(terms))

    return AggregatedPlacement(
        node_selector=node_selector,
        tolerations=tuple(merge_tolerations(device_classes)),
    )
