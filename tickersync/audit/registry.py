"""Explicit id -> plugin registry."""
import logging
from typing import Dict, List

from tickersync.audit.base import (
    AuditError,
    BaseAuditPlugin,
    InvalidPluginError,
    PluginNotFoundError,
)


logger = logging.getLogger(__name__)


class AuditRegistry:
    """Holds the plugins available to the runner, in registration order."""
    
    def __init__(self):
        self._plugins: Dict[str, BaseAuditPlugin] = {}
    
    def register(self, plugin: BaseAuditPlugin):
        """
        Register a plugin.
        
        Raises:
            InvalidPluginError: If the plugin fails validation or its id is taken
        """
        try:
            plugin.validate()
        except AuditError as e:
            plugin_id = getattr(plugin, "id", None) or "unknown"
            raise InvalidPluginError(f"Invalid audit plugin '{plugin_id}': {e}")
        
        if plugin.id in self._plugins:
            raise InvalidPluginError(f"Duplicate audit id: {plugin.id}")
        
        self._plugins[plugin.id] = plugin
        logger.debug(f"Registered audit plugin {plugin.id}")
    
    def must_get(self, plugin_id: str) -> BaseAuditPlugin:
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            raise PluginNotFoundError(f"Audit plugin '{plugin_id}' not found in registry")
        return plugin
    
    def has(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins
    
    def list(self) -> List[BaseAuditPlugin]:
        return list(self._plugins.values())
