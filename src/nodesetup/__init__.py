"""
nodesetup - Worker node setup reconciliation

Installs declared setup components on worker nodes, recording installed
versions in a cache file on each node so only missing or outdated
components are deployed.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from nodesetup.core.cache import CacheEntry, CacheIndex, CacheStore
from nodesetup.core.config import SetupConfig, load_config
from nodesetup.core.deploy import SetupItem
from nodesetup.core.errors import AbortFailure
from nodesetup.core.reconcile import Reconciler, ReconcileResult, setup_node

__all__ = [
    "AbortFailure",
    "CacheEntry",
    "CacheIndex",
    "CacheStore",
    "ReconcileResult",
    "Reconciler",
    "SetupConfig",
    "SetupItem",
    "load_config",
    "setup_node",
    "__version__",
]
