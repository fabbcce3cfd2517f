"""
Node reconciliation.

Example usage:
    from nodesetup.core.reconcile import Reconciler

    reconciler = Reconciler(node, items, deployer, log=log)
    result = reconciler.reconcile()
    print(result.summary())
"""

from .models import PassState, ReconcileResult
from .service import Reconciler, setup_node

__all__ = [
    "PassState",
    "ReconcileResult",
    "Reconciler",
    "setup_node",
]
