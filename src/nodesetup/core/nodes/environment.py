"""Environment materialization for setup scripts.

Scripts run for a node see a layered environment:
- the base environment (the process environment unless given explicitly)
- node .env files, which fill in keys the base does not define
- node variables (NODE_NAME, NODE_ROOT, NODE_LABELS), always set last

Env files never override values already present in the base, the same
precedence exported shell variables get over project .env files.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping

from dotenv import dotenv_values

if TYPE_CHECKING:
    from .provider import NodeContext


def _read_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values = dotenv_values(path)
    out: dict[str, str] = {}
    for k, v in values.items():
        if k is None or v is None:
            continue
        out[str(k)] = str(v)
    return out


def build_node_environment(
    *,
    name: str,
    root: str,
    labels: Iterable[str] = (),
    base: Mapping[str, str] | None = None,
    env_files: Iterable[Path] = (),
) -> dict[str, str]:
    """Build the environment for scripts targeting a node.

    Args:
        name: node name, exported as NODE_NAME
        root: node root path, exported as NODE_ROOT
        labels: node labels, exported space-separated as NODE_LABELS
        base: base environment (defaults to os.environ)
        env_files: dotenv files read in order; earlier files win

    Returns:
        New environment dictionary
    """
    env = dict(os.environ if base is None else base)

    for p in env_files:
        for k, v in _read_env(Path(p)).items():
            if k not in env:
                env[k] = v

    env["NODE_NAME"] = name
    env["NODE_ROOT"] = root
    env["NODE_LABELS"] = " ".join(sorted(labels))
    return env


def node_environment(node: NodeContext, env_files: Iterable[Path] = ()) -> dict[str, str]:
    """Materialize a node's environment with extra dotenv files layered under it.

    Values the node already provides win over the extra files, and the node
    variables stay as the node set them.

    Args:
        node: node whose environment is materialized
        env_files: additional dotenv files, read in order

    Returns:
        New environment dictionary
    """
    env_files = list(env_files)
    if not env_files:
        return node.environment()
    return build_node_environment(
        name=node.name,
        root=node.root,
        labels=node.labels,
        base=node.environment(),
        env_files=env_files,
    )
