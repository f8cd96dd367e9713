"""Fan-out / fan-in over the registered audit plugins."""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from tickersync.audit.registry import AuditRegistry
from tickersync.models.audit import Finding
from tickersync.utils.formatting import format_finding, format_report
from tickersync.utils.time import now_millis


logger = logging.getLogger(__name__)


@dataclass
class AuditReport:
    """Result of running every registered plugin."""
    results: Dict[str, List[Finding]] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    started_at: int = 0
    finished_at: int = 0
    
    @property
    def total(self) -> int:
        return sum(len(findings) for findings in self.results.values())
    
    def to_dict(self) -> dict:
        return {
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
            "total": self.total,
            "results": {
                plugin_id: [f.to_dict() for f in findings]
                for plugin_id, findings in self.results.items()
            },
            "errors": self.errors,
        }


def deduplicate(findings: Iterable[Finding]) -> List[Finding]:
    """Drop repeated (plugin, code, target) findings, keeping the first."""
    seen = set()
    unique: List[Finding] = []
    for finding in findings:
        if finding.key in seen:
            continue
        seen.add(finding.key)
        unique.append(finding)
    return unique


def paginate(findings: List[Finding], page: int = 1, limit: int = 10) -> Tuple[List[Finding], int]:
    """
    Slice findings for display.
    
    Args:
        findings: All findings
        page: 1-based page number, clamped to the valid range
        limit: Page size
        
    Returns:
        (page items, total pages)
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    total_pages = max(1, math.ceil(len(findings) / limit))
    page = min(max(1, page), total_pages)
    start = (page - 1) * limit
    return findings[start:start + limit], total_pages


class AuditRunner:
    """Runs plugins by id and remembers their latest findings."""
    
    def __init__(self, registry: AuditRegistry):
        self.registry = registry
        self.last_results: Dict[str, List[Finding]] = {}
        self.last_report: Optional[AuditReport] = None
    
    async def run(self, plugin_id: str, targets: Optional[List[str]] = None) -> List[Finding]:
        """
        Run one plugin.
        
        Raises:
            PluginNotFoundError: Unknown plugin id
            TargetsNotSupportedError: targets given to a whole-repository plugin
        """
        plugin = self.registry.must_get(plugin_id)
        findings = deduplicate(await plugin.run(targets))
        # Targeted runs only cover a subset, so they do not replace the cache
        if targets is None:
            self.last_results[plugin_id] = findings
        logger.info(f"Audit {plugin_id}: {len(findings)} findings")
        for finding in findings:
            logger.debug(format_finding(finding))
        return findings
    
    async def run_all(self) -> AuditReport:
        """Run every plugin; one failing plugin does not stop the others."""
        report = AuditReport(started_at=now_millis())
        for plugin in self.registry.list():
            try:
                report.results[plugin.id] = await self.run(plugin.id)
            except Exception as e:
                logger.error(f"Audit plugin {plugin.id} failed: {e}", exc_info=True)
                report.errors[plugin.id] = str(e)
        report.finished_at = now_millis()
        self.last_report = report
        logger.info(format_report(report.results, report.errors))
        return report
