"""Audit plugin contract."""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, TypeVar

from tickersync.core.config import settings
from tickersync.models.audit import Finding, Severity, Status


T = TypeVar("T")


class AuditError(Exception):
    """Base exception for audit failures."""
    pass


class TargetsNotSupportedError(AuditError, ValueError):
    """Raised when a whole-repository plugin is given targets."""
    pass


class InvalidPluginError(AuditError, ValueError):
    """Raised when a plugin fails validation at registration."""
    pass


class PluginNotFoundError(AuditError, LookupError):
    """Raised when no plugin is registered under an id."""
    pass


class BaseAuditPlugin(ABC):
    """
    One analyzer over the identity repositories.
    
    Plugins emit FAIL findings only: an empty list means every unit passed.
    They never mutate state and recompute from scratch on every run.
    """
    
    id: str = ""
    title: str = ""
    
    def __init__(self, batch_size: Optional[int] = None):
        self.batch_size = batch_size or settings.audit_batch_size
    
    def validate(self):
        """
        Check the plugin is well formed.
        
        Raises:
            InvalidPluginError: If id or title is empty
        """
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidPluginError(f"{type(self).__name__} has an empty id")
        if not isinstance(self.title, str) or not self.title.strip():
            raise InvalidPluginError(f"Plugin '{self.id}' has an empty title")
    
    def reject_targets(self, targets: Optional[List[str]]):
        if targets is not None:
            raise TargetsNotSupportedError(f"{self.title} audit does not support targeted mode")
    
    async def batched(self, items: Iterable[T]) -> AsyncIterator[T]:
        """Iterate items, yielding to the event loop after every batch."""
        for count, item in enumerate(items, 1):
            yield item
            if count % self.batch_size == 0:
                await asyncio.sleep(0)
    
    def finding(
        self,
        code: str,
        target: str,
        message: str,
        severity: Severity,
        data: Optional[Dict[str, Any]] = None
    ) -> Finding:
        return Finding(
            plugin_id=self.id,
            code=code,
            target=target,
            message=message,
            severity=severity,
            status=Status.FAIL,
            data=data,
        )
    
    @abstractmethod
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        """
        Run the audit.
        
        Args:
            targets: Restrict to these tickers (targeted plugins only)
            
        Returns:
            FAIL findings
            
        Raises:
            TargetsNotSupportedError: If targets is given to a whole-repository plugin
        """
        pass
