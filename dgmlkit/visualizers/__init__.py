"""Ready-made builders for common graph sources."""

from .types import collect_types, types_registry, types_to_graph

__all__ = ["collect_types", "types_registry", "types_to_graph"]
