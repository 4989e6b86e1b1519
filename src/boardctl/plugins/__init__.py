"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) and ``.boardctl/plugins/`` files.
INVARIANT: Plugin failures are warnings, never errors.
"""

from boardctl.plugins.event_bus import EventBus
from boardctl.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
