"""Workspace — a configured Store plus its snapshot database.

The Workspace is the single dependency injected into every service. It
owns the in-memory :class:`Store`, the schema validator, the lazily opened
SQLite snapshot database, and (once :meth:`init_event_bus` runs) the
plugin event bus.

Configuration is applied in a fixed order so later sources win:
plugin templates, then ``[modules.*.template]`` from config, then
relations and schemas.

:meth:`session` brackets a unit of work: load every snapshot into the
store, yield it, and save every module back when the block succeeds.
Saved rows are restored with schema validation suspended, so tightening
a schema never drops existing items. A module that still loads short is
not saved back.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from modstore.infrastructure.database.engine import init_database
from modstore.infrastructure.database.snapshots import SnapshotRepository
from modstore.infrastructure.store import Store
from modstore.infrastructure.validation import SchemaValidator

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine

    from modstore.config.settings import StoreSettings

logger = logging.getLogger(__name__)


class Workspace:
    """Repository wrapping the store, its configuration, and persistence.

    Constructed once at CLI startup from :class:`StoreSettings`. Services
    receive the Workspace via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: StoreSettings) -> None:
        self._settings = settings
        self._store = Store()
        self._validator = SchemaValidator()
        self._engine: Engine | None = None
        self._snapshots: SnapshotRepository | None = None
        self._event_bus: Any | None = None
        self._configured = False
        self._skip_save = False

    @property
    def root(self) -> Path:
        """The project root directory."""
        return self._settings.root

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def store(self) -> Store:
        """The configured in-memory store."""
        if not self._configured:
            self._configure()
        return self._store

    @property
    def validator(self) -> SchemaValidator:
        return self._validator

    @property
    def snapshots(self) -> SnapshotRepository:
        """Snapshot repository (opens the database on first access)."""
        if self._snapshots is None:
            self._engine = init_database(self._settings.database_path)
            self._snapshots = SnapshotRepository(self._engine)
        return self._snapshots

    @property
    def event_bus(self) -> Any | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self) -> None:
        """Discover plugins, register their templates, and attach the bus.

        Called by AppContext when the workspace is first accessed. Must run
        before the store is first used so config templates still override
        plugin ones.
        """
        from modstore.plugins.event_bus import EventBus
        from modstore.plugins.manager import PluginManager

        pm = PluginManager()
        if self._settings.plugins.enabled:
            pm.discover_and_load(local_dir=self._settings.plugins_dir)
        for module, template in pm.collect_templates().items():
            self._store.register_template(module, template)

        self._event_bus = EventBus(pm)
        self._store.attach_event_bus(self._event_bus)

    @contextmanager
    def session(self) -> Iterator[Store]:
        """Load all snapshots, yield the store, then save on success.

        Plugins are not notified of the re-adds performed while loading.
        Nothing is written back when the block raises or autosave is off.
        Calling :meth:`skip_save` inside the block has the same effect.
        """
        store = self.store
        self._skip_save = False
        store.attach_event_bus(None)
        try:
            with self._validator.suspended():
                loaded = self.snapshots.load_all(store)
        finally:
            store.attach_event_bus(self._event_bus)
        saved = self.snapshots.saved_counts()
        short = sorted(module for module, count in loaded.items() if count < saved[module])
        if short:
            logger.warning("Not saving modules that loaded incompletely: %s", ", ".join(short))
        yield store
        if self._skip_save:
            logger.debug("Autosave skipped for this session")
        elif self._settings.storage.autosave:
            self.snapshots.save_all(store, exclude=short)

    def skip_save(self) -> None:
        """Keep the current session from writing snapshots back."""
        self._skip_save = True

    def close(self) -> None:
        """Dispose the database engine, if one was opened."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._snapshots = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _configure(self) -> None:
        self._configured = True
        for module, module_config in self._settings.modules.items():
            if module_config.template:
                self._store.register_template(module, module_config.template)
            if module_config.rules:
                self._validator.register_schema(module, module_config.rules)
                self._validator.install(self._store, module)
        for relation in self._settings.relations:
            self._store.add_relation(
                relation.module_from,
                relation.module_to,
                relation.key_from,
                relation.key_to,
            )
        logger.debug(
            "Configured store: %d modules, %d relations",
            len(self._settings.modules),
            len(self._settings.relations),
        )
