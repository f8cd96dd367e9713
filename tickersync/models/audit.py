"""Audit finding model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    """How urgent a finding is."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Status(str, Enum):
    """Finding outcome. Plugins only ever emit FAIL."""
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass
class Finding:
    """One violation reported by an audit plugin."""
    plugin_id: str
    code: str
    target: str
    message: str
    severity: Severity
    status: Status = Status.FAIL
    data: Optional[Dict[str, Any]] = field(default=None)
    
    @property
    def key(self) -> tuple:
        """Identity used for deduplication."""
        return (self.plugin_id, self.code, self.target)
    
    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "pluginId": self.plugin_id,
            "code": self.code,
            "target": self.target,
            "message": self.message,
            "severity": self.severity.value,
            "status": self.status.value,
        }
        if self.data is not None:
            result["data"] = self.data
        return result
