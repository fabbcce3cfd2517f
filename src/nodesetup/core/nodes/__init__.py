"""
Worker node handles.

Provides the NodeContext protocol the reconciler works against, a local
filesystem implementation, label expression matching and script environment
construction.

Example usage:
    from pathlib import Path
    from nodesetup.core.nodes import LocalNode, match_labels

    node = LocalNode("agent-1", Path("/srv/agent-1"), labels={"linux"})
    match_labels("linux && !arm", node.labels)
"""

from .environment import build_node_environment, node_environment
from .labels import LabelMatcher, match_labels, validate_expression
from .local import LocalNode
from .models import PlatformFamily, control_platform
from .provider import NodeContext

__all__ = [
    # Models
    "PlatformFamily",
    "control_platform",
    # Protocol and implementations
    "NodeContext",
    "LocalNode",
    # Labels
    "LabelMatcher",
    "match_labels",
    "validate_expression",
    # Environment
    "build_node_environment",
    "node_environment",
]
