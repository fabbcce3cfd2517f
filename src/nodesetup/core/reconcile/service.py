"""
Node reconciliation service.

Brings a node up to date with the declared setup items, doing only the work
that is missing:

1. Ensure the node's cache file exists and load the recorded installations
2. For each item whose selector matches the node, in configuration order:
   - skip it if the cache already records its current version
   - otherwise deploy it (prepare script, file bundle, install script) and
     record the new version in the cache
3. Write the cache back to the node, even when nothing changed

A failing script ends the pass. Components installed before the failure are
still written to the cache; the failing component and everything after it
are left for the next pass.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from nodesetup.core.cache.index import CacheIndex
from nodesetup.core.cache.store import CacheStore
from nodesetup.core.cleanup.service import Cleaner
from nodesetup.core.config.models import SetupConfig
from nodesetup.core.deploy.deployer import Deployer, LocalDeployer
from nodesetup.core.deploy.models import SetupItem
from nodesetup.core.errors import AbortFailure, SetupError
from nodesetup.core.log import LineSink, SetupLog
from nodesetup.core.nodes.environment import node_environment
from nodesetup.core.nodes.labels import LabelMatcher, match_labels
from nodesetup.core.nodes.provider import NodeContext

from .models import PassState, ReconcileResult

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Reconciles one node against a list of setup items.

    A Reconciler owns the node's cache store and index; reconcilers for
    different nodes share nothing. Callers must not run two passes against
    the same node at once.

    Example:
        >>> reconciler = Reconciler(node, items, LocalDeployer(), log=SetupLog(print))
        >>> result = reconciler.reconcile()
        >>> print(result.summary())
        Installed 2 component(s), 1 up to date
    """

    def __init__(
        self,
        node: NodeContext,
        items: Sequence[SetupItem],
        deployer: Deployer,
        log: SetupLog | None = None,
        store: CacheStore | None = None,
        label_matcher: LabelMatcher = match_labels,
        env_files: Sequence[Path] = (),
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            node: Node to bring up to date
            items: Setup items in configuration order
            deployer: Transport for scripts and file bundles
            log: Log sink (messages are dropped if None)
            store: Cache store (defaults to the standard cache file on the node)
            label_matcher: Selector evaluation function
            env_files: Extra dotenv files layered under the node environment
        """
        self.node = node
        self.items = tuple(items)
        self.deployer = deployer
        self.log = log or SetupLog()
        self.store = store or CacheStore(node)
        self.label_matcher = label_matcher
        self.env_files = tuple(env_files)
        self.index = CacheIndex()
        self.state = PassState.UNINITIALIZED
        self.last_result: ReconcileResult | None = None

    def matches(self, item: SetupItem) -> bool:
        """Check whether an item's selector applies to this node."""
        return self.label_matcher(item.selector, self.node.labels)

    def has_latest(self, item: SetupItem) -> bool:
        """Check whether the loaded cache records the item's current version."""
        return self.index.contains(item.cache_entry())

    def reconcile(self) -> ReconcileResult:
        """
        Run one reconciliation pass.

        Returns:
            ReconcileResult describing what was done

        Raises:
            AbortFailure: If a prepare or install script exits nonzero.
                The cache is persisted before the exception propagates.
            CacheReadError: If the cache file cannot be read. Nothing is
                persisted.
            CacheWriteError: If the cache file cannot be written
        """
        self.state = PassState.LOADING
        first_contact = self._load()

        result = ReconcileResult(node=self.node.name, first_contact=first_contact)
        self.last_result = result

        self.state = PassState.RUNNING
        try:
            for item in self.items:
                self._reconcile_item(item, result)
        except SetupError as e:
            self.state = PassState.ABORTED
            e.context.setdefault("node", self.node.name)
            self._persist(result)
            raise

        self.state = PassState.PERSISTING
        self._persist(result)
        self.state = PassState.DONE
        return result

    def _load(self) -> bool:
        """
        Load the cache index from the node.

        Returns:
            True if this is a first-contact pass
        """
        created = self.store.create_empty()
        if created:
            self.log.debug(f"New setup cache created on {self.store.path}")
            self.index = CacheIndex()
        else:
            self.index = self.store.load_index()

        if created or len(self.index) == 0:
            self.log.info(f"Executing first install for {self.node.name}")
            return True

        self.log.info(f"Updating existing installations for {self.node.name}")
        self.log.debug(
            "Given cache contains these lines:\n"
            + "\n".join(self.index.to_lines())
        )
        return False

    def _reconcile_item(self, item: SetupItem, result: ReconcileResult) -> None:
        if not self.matches(item):
            logger.debug("Selector %r does not match %s", item.selector, self.node.name)
            result.skipped.append(item.component)
            return

        if self.has_latest(item):
            self.log.info(f"{self.node.name} has latest version of {item.component}")
            result.up_to_date.append(item.component)
            return

        self.log.info(f"Installing {item.component}")
        self._deploy(item)
        outcome = self.index.upsert(item.cache_entry())
        logger.debug("Cache upsert for %s: %s", item.component, outcome.value)
        self.log.info(f"Install {item.component} succeeded")
        result.installed.append(item.component)

    def _deploy(self, item: SetupItem) -> None:
        """
        Run every configured deploy step of an item.

        Raises:
            AbortFailure: If a script exits nonzero
        """
        env = node_environment(self.node, self.env_files)

        if item.prepare_script:
            code = self.deployer.run_on_control_side(item.prepare_script, self.node, env)
            self._validate_response(code, item, "prepare")

        if item.files_dir is not None:
            self.deployer.copy_tree(item.files_dir, self.node.root)

        if item.install_script:
            code = self.deployer.run_on_target(item.install_script, self.node.root, env)
            self._validate_response(code, item, "install")

    def _validate_response(self, code: int, item: SetupItem, step: str) -> None:
        if code != 0:
            self.log.info(f"Script failed with exit code {code}")
            raise AbortFailure(code, component=item.component, step=step)

    def _persist(self, result: ReconcileResult) -> None:
        self.log.debug(
            f"Updating {self.store.path} with\n" + "\n".join(self.index.to_lines())
        )
        self.store.save_index(self.index)
        result.entries = self.index.entries()


def setup_node(
    node: NodeContext,
    config: SetupConfig,
    deployer: Deployer | None = None,
    sink: LineSink | None = None,
) -> ReconcileResult:
    """
    Reconcile a node from a configuration, then clean temporary files.

    A cleanup failure is logged and does not fail the setup.

    Args:
        node: Node to bring up to date
        config: Setup configuration
        deployer: Transport (defaults to a LocalDeployer honoring the
            configured script timeout)
        sink: Log sink

    Returns:
        ReconcileResult of the reconciliation pass

    Raises:
        AbortFailure: If a prepare or install script exits nonzero
    """
    log = SetupLog(sink, debug=config.debug)
    if deployer is None:
        deployer = LocalDeployer(log=log, timeout_seconds=config.script_timeout_seconds)

    store = CacheStore(node, config.cache.filename)
    result = Reconciler(
        node, config.items, deployer, log=log, store=store, env_files=config.env_files
    ).reconcile()
    log.info(result.summary())

    if config.cleanup.enabled:
        try:
            Cleaner(
                node, deployer, config.cleanup, log=log, env_files=config.env_files
            ).clean()
        except AbortFailure as e:
            logger.warning("Cleanup on %s failed: %s", node.name, e)
            log.info(f"Cleanup failed on {node.name}: {e}")

    return result
