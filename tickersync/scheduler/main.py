"""Periodic audits, repository autosave and GTT mirror refresh."""
import logging
import asyncio
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from tickersync.core.config import settings
from tickersync.core.container import Container, get_container
from tickersync.core.redis import close_redis
from tickersync.providers import ProviderError

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class AuditScheduler:
    """Scheduler for background audit and persistence jobs."""
    
    def __init__(self, container: Container | None = None):
        logger.info("Initializing AuditScheduler...")
        self.scheduler = AsyncIOScheduler()
        self.container = container
        logger.info("AuditScheduler initialized")
    
    async def _get_container(self) -> Container:
        if self.container is None:
            self.container = await get_container()
        return self.container
    
    async def run_audits(self):
        """Run every audit plugin against the latest persisted state."""
        try:
            container = await self._get_container()
            await container.refresh()
            report = await container.runner.run_all()
            logger.info(f"Scheduled audit finished: {report.total} findings, {len(report.errors)} plugin errors")
        except Exception as e:
            logger.error(f"Error running scheduled audits: {e}", exc_info=True)
    
    async def autosave(self):
        """Persist dirty repositories."""
        try:
            container = await self._get_container()
            written = await container.save()
            if written:
                logger.debug(f"Autosaved {written} repositories")
        except Exception as e:
            logger.error(f"Error autosaving repositories: {e}", exc_info=True)
    
    async def refresh_orders(self):
        """Refresh the GTT order mirror and publish it for the API's trade-risk audit."""
        try:
            container = await self._get_container()
            await container.order_repo.refresh()
            await container.orders.refresh()
            await container.order_repo.save()
        except ProviderError as e:
            logger.warning(f"GTT refresh skipped: {e}")
        except Exception as e:
            logger.error(f"Error refreshing GTT orders: {e}", exc_info=True)
    
    def start(self):
        """Start the scheduler with all jobs."""
        logger.info("="*60)
        logger.info("Starting audit scheduler...")
        logger.info(f"Log level: {settings.log_level}")
        logger.info(f"Audit cadence: every {settings.audit_cadence_minutes} minutes")
        logger.info(f"Autosave cadence: every {settings.autosave_seconds} seconds")
        logger.info(f"GTT refresh cadence: every {settings.order_refresh_minutes} minutes")
        logger.info("="*60)
        
        self.scheduler.add_job(
            self.run_audits,
            trigger=IntervalTrigger(minutes=settings.audit_cadence_minutes),
            id="run_audits",
            replace_existing=True
        )
        
        self.scheduler.add_job(
            self.autosave,
            trigger=IntervalTrigger(seconds=settings.autosave_seconds),
            id="autosave",
            replace_existing=True
        )
        
        self.scheduler.add_job(
            self.refresh_orders,
            trigger=IntervalTrigger(minutes=settings.order_refresh_minutes),
            id="refresh_orders",
            replace_existing=True
        )
        
        self.scheduler.start()
        logger.info("Scheduler started successfully")
    
    async def run(self):
        """Run scheduler indefinitely."""
        await self._get_container()
        self.start()
        
        try:
            while True:
                await asyncio.sleep(1)
        except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
            logger.info("Shutting down scheduler...")
            self.scheduler.shutdown()
            await self.autosave()
            await self.container.alerts.drain()
            await close_redis()


async def main():
    """Main entry point for scheduler."""
    scheduler = AuditScheduler()
    await scheduler.run()


if __name__ == "__main__":
    asyncio.run(main())
