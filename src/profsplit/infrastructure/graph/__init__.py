"""Reference graph over orders, shipments, and profiles (NetworkX)."""

from profsplit.infrastructure.graph.engine import ReferenceGraph

__all__ = ["ReferenceGraph"]
