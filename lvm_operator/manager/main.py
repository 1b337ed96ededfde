#!/usr/bin/env python3
"""
LVM operator - command line entry point.

Renders the desired vg-manager DaemonSet for an LVMCluster manifest, or
prints the image the agent would run.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Mapping, Optional

import yaml

from .config import OperatorConfig
from ..controllers.daemonset import build_agent_daemonset
from ..controllers.errors import ImageResolutionError
from ..controllers.image import ImageResolver
from ..data.normalization import ClusterConfigError, load_cluster_config
from ..lookup.base import PodLookupError
from ..lookup.kube import KubePodLookup


def _log(msg: str) -> None:
    """Diagnostics go to stderr; stdout carries the manifest."""
    print(msg, file=sys.stderr, flush=True)


def create_image_provider(
    config: OperatorConfig,
    image: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Callable[[], str]:
    """Create the image provider for the builder.

    An image given on the command line wins. Otherwise an ImageResolver is
    used, backed by the in-cluster API when it is reachable.
    """
    if image:
        return lambda: image

    environ = os.environ if environ is None else environ
    lookup = None
    try:
        lookup = KubePodLookup.in_cluster(environ, timeout=config.lookup_timeout)
    except PodLookupError as e:
        _log(f"[manager] Self-lookup unavailable: {e}")
    return ImageResolver(config, lookup, environ)


def close_image_provider(provider: Callable[[], str]) -> None:
    """Clean up session resources held by the provider's lookup."""
    if isinstance(provider, ImageResolver):
        provider.close()


def render_manifest(data: dict, output: str) -> str:
    if output == "json":
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False)


def run_render(args) -> int:
    """Render the vg-manager DaemonSet for one LVMCluster."""
    config = OperatorConfig.load(args.config)
    if args.namespace:
        config = replace(config, namespace=args.namespace)
    _log(f"[config] Loaded: namespace={config.namespace!r}, agent={config.agent.unit_name!r}")

    try:
        cluster = load_cluster_config(Path(args.cluster))
    except (OSError, ClusterConfigError) as e:
        _log(f"[manager] Unable to load LVMCluster {args.cluster}: {e}")
        return 1

    provider = create_image_provider(config, args.image)
    try:
        daemonset = build_agent_daemonset(cluster, config, provider)
    except ImageResolutionError as e:
        _log(f"[manager] Failed to get image from running operator: {e}")
        return 1
    finally:
        close_image_provider(provider)

    _log(
        f"[manager] Creating VG manager daemonset: image={daemonset.template.containers[0].image!r}, "
        f"device_classes={len(cluster.device_classes)}"
    )
    sys.stdout.write(render_manifest(daemonset.to_dict(), args.output))
    return 0


def run_resolve_image(args) -> int:
    """Print the image the agent would run."""
    config = OperatorConfig.load(args.config)
    provider = create_image_provider(config)
    try:
        image = provider()
    except ImageResolutionError as e:
        _log(f"[manager] Failed to get image from running operator: {e}")
        return 1
    finally:
        close_image_provider(provider)
    print(image)
    return 0


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="LVM operator - vg-manager DaemonSet",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=str, help="Path to operator config YAML file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render the vg-manager DaemonSet")
    render.add_argument("cluster", help="Path to an LVMCluster manifest (YAML)")
    render.add_argument("--image", default=None, help="Agent image (skips image resolution)")
    render.add_argument("--namespace", default=None, help="Operator namespace override")
    render.add_argument(
        "--output",
        "-o",
        choices=("yaml", "json"),
        default="yaml",
        help="Manifest output format",
    )
    render.set_defaults(func=run_render)

    resolve = subparsers.add_parser("resolve-image", help="Print the agent image")
    resolve.set_defaults(func=run_resolve_image)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the lvm-operator command."""
    args = parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
