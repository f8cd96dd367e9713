"""Plain-text formatting of audit findings and reports."""
from typing import Dict, List

from tickersync.models.audit import Finding, Severity


SEVERITY_ICONS = {
    Severity.HIGH: "🔴",
    Severity.MEDIUM: "🟠",
    Severity.LOW: "⚪",
}


def format_finding(finding: Finding) -> str:
    """
    Format a single finding as one line.
    
    Args:
        finding: Audit finding
        
    Returns:
        "<icon> [CODE] target: message"
    """
    icon = SEVERITY_ICONS.get(finding.severity, "")
    return f"{icon} [{finding.code}] {finding.target}: {finding.message}"


def format_section_header(title: str, count: int) -> str:
    """Header used by audit sections."""
    if count == 0:
        return f"✓ No {title}"
    return f"{title}: {count}"


def format_report(results: Dict[str, List[Finding]], errors: Dict[str, str] = None) -> str:
    """
    Format a full audit run for logs.
    
    Args:
        results: plugin id -> findings
        errors: plugin id -> error message for plugins that crashed
        
    Returns:
        Multi-line summary
    """
    total = sum(len(findings) for findings in results.values())
    lines = [f"📋 Audit report: {total} findings across {len(results)} plugins"]
    
    for plugin_id, findings in results.items():
        high = sum(1 for f in findings if f.severity == Severity.HIGH)
        lines.append(f"  {plugin_id}: {len(findings)} ({high} high)")
    
    for plugin_id, message in (errors or {}).items():
        lines.append(f"  ✗ {plugin_id}: {message}")
    
    return "\n".join(lines)
