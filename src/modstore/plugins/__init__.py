"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from a local directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from modstore.plugins.event_bus import EventBus
from modstore.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
