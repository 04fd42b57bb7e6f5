"""Shape classification for decoded response trees."""

from collections.abc import Mapping
from enum import Enum
from typing import Any


class NodeKind(Enum):
    """Shape of a decoded node."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    STRUCTURE = "structure"


def classify(node: Any) -> NodeKind:
    if isinstance(node, Mapping):
        return NodeKind.STRUCTURE
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def is_complex(node: Any) -> bool:
    """Return True for nodes the mapper has to descend into."""
    return classify(node) is not NodeKind.SCALAR
