"""Audit API routes: run plugins, preview and apply fixes."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from typing import List, Optional
import logging

from tickersync.audit.base import PluginNotFoundError, TargetsNotSupportedError
from tickersync.audit.runner import paginate
from tickersync.core.container import Container, get_synced_container

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/audit", tags=["audit"])


class FixRequest(BaseModel):
    """Fix findings of one plugin; all current findings when targets is omitted."""
    targets: Optional[List[str]] = None


def _section_or_404(container: Container, plugin_id: str):
    section = container.sections.get(plugin_id)
    if section is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Audit plugin '{plugin_id}' not found"
        )
    return section


async def _current_findings(container: Container, plugin_id: str):
    # Always re-run: state may have changed since the cached run
    return await container.runner.run(plugin_id)


@router.get("/plugins")
async def list_plugins(container: Container = Depends(get_synced_container)):
    """Registered plugins with their section metadata."""
    return [
        {
            "id": plugin.id,
            "title": plugin.title,
            "description": container.sections[plugin.id].description if plugin.id in container.sections else "",
        }
        for plugin in container.registry.list()
    ]


@router.post("/run")
async def run_all(container: Container = Depends(get_synced_container)):
    """Run every plugin."""
    report = await container.runner.run_all()
    return report.to_dict()


@router.get("/report")
async def last_report(container: Container = Depends(get_synced_container)):
    """Most recent full run, if any."""
    if container.runner.last_report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No audit has run yet")
    return container.runner.last_report.to_dict()


@router.get("/{plugin_id}")
async def run_plugin(
    plugin_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=500),
    targets: Optional[List[str]] = Query(None),
    container: Container = Depends(get_synced_container)
):
    """Run one plugin and return a page of its findings."""
    try:
        findings = await container.runner.run(plugin_id, targets)
    except PluginNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TargetsNotSupportedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    
    section = container.sections.get(plugin_id)
    page_size = limit or (section.limit if section else 10)
    items, total_pages = paginate(findings, page, page_size)
    
    return {
        "pluginId": plugin_id,
        "header": section.header_formatter(findings) if section else str(len(findings)),
        "total": len(findings),
        "page": min(page, total_pages),
        "totalPages": total_pages,
        "findings": [
            {
                **finding.to_dict(),
                "color": section.severity_color(finding) if section else None,
                "open": section.on_left_click(finding) if section else None,
            }
            for finding in items
        ],
    }


@router.get("/{plugin_id}/plan")
async def plan_fixes(plugin_id: str, container: Container = Depends(get_synced_container)):
    """Preview what fixing the current findings would do."""
    section = _section_or_404(container, plugin_id)
    findings = await _current_findings(container, plugin_id)
    plans = [section.plan(finding) for finding in findings]
    return [plan.to_dict() for plan in plans if plan is not None]


@router.post("/{plugin_id}/fix")
async def fix_findings(
    plugin_id: str,
    request: FixRequest,
    container: Container = Depends(get_synced_container)
):
    """Apply fixes, persist, and re-run the plugin."""
    section = _section_or_404(container, plugin_id)
    findings = await _current_findings(container, plugin_id)
    
    if request.targets is not None:
        wanted = set(request.targets)
        findings = [f for f in findings if f.target in wanted]
        if not findings:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="None of the requested targets has a current finding"
            )
    
    removed = await section.on_fix_all(findings)
    await container.save()
    remaining = await container.runner.run(plugin_id)
    logger.info(f"Fixed {len(findings)} {plugin_id} findings, {len(remaining)} remain")
    
    return {
        "pluginId": plugin_id,
        "fixed": len(findings),
        "removed": removed,
        "remaining": len(remaining),
        "header": section.header_formatter(remaining),
    }
