"""Audit engine package initialization."""
from tickersync.audit.base import (
    AuditError,
    BaseAuditPlugin,
    InvalidPluginError,
    PluginNotFoundError,
    TargetsNotSupportedError,
)
from tickersync.audit.registry import AuditRegistry
from tickersync.audit.runner import AuditReport, AuditRunner, deduplicate, paginate

__all__ = [
    "AuditError",
    "BaseAuditPlugin",
    "InvalidPluginError",
    "PluginNotFoundError",
    "TargetsNotSupportedError",
    "AuditRegistry",
    "AuditReport",
    "AuditRunner",
    "deduplicate",
    "paginate",
]
