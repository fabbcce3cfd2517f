"""
Setup items and the deploy transport.

Example usage:
    from nodesetup.core.deploy import LocalDeployer, SetupItem

    item = SetupItem(selector="linux", version="1.2", install_script="make install")
    deployer = LocalDeployer()
"""

from .deployer import Deployer, LocalDeployer
from .models import SetupItem

__all__ = [
    "Deployer",
    "LocalDeployer",
    "SetupItem",
]
