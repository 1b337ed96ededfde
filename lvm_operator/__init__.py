"""LVM operator - desired state of the per-node vg-manager agent."""

__version__ = "0.1.0"
