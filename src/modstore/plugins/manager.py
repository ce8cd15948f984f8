"""Plugin discovery and loading.

Plugins come from two places:

- installed distributions advertising the ``modstore.plugins`` entry point,
- single-file ``*.py`` plugins in the local plugin directory
  (``.modstore/plugins/`` under the project root by default).

A plugin may implement any lifecycle hook from :mod:`modstore.plugins.hookspecs`
and may contribute module templates through ``register_templates``.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import pluggy

from modstore.plugins.hookspecs import StoreHookSpec

PROJECT_NAME = "modstore"
ENTRY_POINT_GROUP = "modstore.plugins"
LOCAL_MODULE_PREFIX = "modstore_local_plugin_"

logger = logging.getLogger(__name__)


def _has_hook_impls(cls: type) -> bool:
    """True if any public attribute of *cls* carries the ``modstore_impl`` marker."""
    return any(
        callable(getattr(cls, name, None)) and getattr(getattr(cls, name), "modstore_impl", None)
        for name in dir(cls)
        if not name.startswith("_")
    )


def _import_file(py_file: Path, module_name: str) -> ModuleType | None:
    """Execute *py_file* as module *module_name*; None (and a warning) on failure."""
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        logger.warning("Cannot import local plugin %s", py_file)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
        return None
    return module


class PluginManager:
    """Thin wrapper over ``pluggy.PluginManager`` with modstore's hook specs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(StoreHookSpec)
        self._loaded = False

    @property
    def hook(self) -> pluggy.HookRelay:
        """Hook relay used by :class:`EventBus` to call ``post_*`` hooks."""
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local single-file plugins.

        Returns the names of every registered plugin afterwards.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_class_plugins()
        if local_dir is not None and local_dir.is_dir():
            for py_file in sorted(local_dir.glob("*.py")):
                if not py_file.name.startswith("_"):
                    self._load_local_file(py_file)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._name_of(plugin) for plugin in self._pm.get_plugins()]

    def collect_templates(self) -> dict[str, dict[str, Any]]:
        """Merge the module templates every plugin contributes.

        Later registrations win on a module name collision. A plugin that
        raises or returns a non-dict is skipped with a warning, and so is
        any single template that is not a mapping.
        """
        templates: dict[str, dict[str, Any]] = {}
        for plugin in self._pm.get_plugins():
            contributed = self._templates_from(plugin)
            for module, template in contributed.items():
                if isinstance(template, dict):
                    templates[module] = template
                else:
                    logger.warning(
                        "Skipping template %r from plugin %s: not a mapping",
                        module,
                        self._name_of(plugin),
                    )
        return templates

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or type(plugin).__name__

    def _templates_from(self, plugin: object) -> dict[str, Any]:
        register = getattr(plugin, "register_templates", None)
        if register is None:
            return {}
        try:
            contributed = register()
        except Exception:
            logger.warning(
                "Plugin %s failed to register templates", self._name_of(plugin), exc_info=True
            )
            return {}
        if contributed is None:
            return {}
        if not isinstance(contributed, dict):
            logger.warning("Plugin %s returned non-dict templates", self._name_of(plugin))
            return {}
        return contributed

    def _load_local_file(self, py_file: Path) -> None:
        """Register every hook-carrying class defined in *py_file*.

        Broken files and classes that fail to instantiate are logged and
        skipped; they never stop the remaining plugins from loading.
        """
        module_name = f"{LOCAL_MODULE_PREFIX}{py_file.stem}"
        module = _import_file(py_file, module_name)
        if module is None:
            return
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ != module_name or not _has_hook_impls(cls):
                continue
            try:
                self.register_plugin(cls(), name=module_name)
            except Exception:
                logger.warning(
                    "Cannot instantiate plugin %s from %s", cls.__name__, py_file, exc_info=True
                )

    def _instantiate_class_plugins(self) -> None:
        """Swap entry points that registered a bare class for an instance of it."""
        for plugin in self.get_plugins():
            if not (inspect.isclass(plugin) and _has_hook_impls(plugin)):
                continue
            name = self._name_of(plugin)
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Cannot instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
