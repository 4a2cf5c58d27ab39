"""Node name generation and flag merging."""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models import NodeConfig

GENERATED_NAME_PREFIX = "node-"


def generated_name(index: int) -> str:
    """Name given to the index-th node configured without a name."""
    return f"{GENERATED_NAME_PREFIX}{index}"


def resolve_node_names(node_configs: Sequence[NodeConfig]) -> List[str]:
    """
    Resolve the name of every node config.

    Explicit names are kept. Unnamed nodes get ``node-<i>`` where ``i``
    counts unnamed nodes in configuration order. Collisions with explicit
    names are not resolved here; the validator rejects them.

    Args:
        node_configs: Node configs in configuration order

    Returns:
        Names aligned with ``node_configs``
    """
    names = []
    unnamed = 0
    for config in node_configs:
        if config.name:
            names.append(config.name)
        else:
            names.append(generated_name(unnamed))
            unnamed += 1
    return names


def next_free_name(taken: Iterable[str]) -> str:
    """Lowest generated name not already in ``taken``."""
    taken = set(taken)
    index = 0
    while generated_name(index) in taken:
        index += 1
    return generated_name(index)


def merge_flags(
    network_flags: Optional[Dict[str, Any]],
    node_flags: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Merge network-wide and node-level flags.

    The result holds the union of both; node-level values win.
    """
    merged = dict(network_flags or {})
    merged.update(node_flags or {})
    return merged
