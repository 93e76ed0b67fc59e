# ==========================
# Scheduler Service
# ==========================
import logging
from datetime import datetime, timezone
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import Optional
from config.settings import settings
from services.exceptions import TokenListUnavailableError

logger = logging.getLogger(__name__)

class SchedulerService:
    """
    Service for the periodic token list refresh
    Rebuilds the unfiltered list and broadcasts it over Socket.IO
    """

    def __init__(self, interval_seconds: Optional[int] = None):
        self.scheduler = AsyncIOScheduler()
        self.last_update: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.last_token_count = 0
        self.interval_seconds = interval_seconds or settings.token_broadcast_interval
        self.is_updating = False
        self.aggregation_service = None  # Will be injected
        self.websocket_service = None  # Will be injected

    def inject_aggregation_service(self, aggregation_service):
        """Inject aggregation service dependency"""
        self.aggregation_service = aggregation_service

    def inject_websocket_service(self, websocket_service):
        """Inject websocket service dependency"""
        self.websocket_service = websocket_service

    async def broadcast_tokens_task(self):
        """Task to rebuild the token list and push it to clients"""
        if self.is_updating:
            logger.info("Token broadcast already in progress, skipping...")
            return

        if not self.aggregation_service or not self.websocket_service:
            logger.error("Aggregation or websocket service not injected")
            return

        try:
            self.is_updating = True
            response = await self.aggregation_service.build_token_list()
            payload = response.model_dump(mode='json', by_alias=True)
            await self.websocket_service.emit_tokens_update(payload)

            self.last_update = datetime.now(timezone.utc)
            self.last_token_count = response.total_count
            self.last_error = None

        except TokenListUnavailableError as e:
            self.last_error = str(e)
            logger.warning(f"Token broadcast skipped: {e}")
            await self.websocket_service.emit_tokens_error("Failed to fetch tokens")
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Error during token broadcast: {e}")
        finally:
            self.is_updating = False

    def start(self):
        """Start the scheduler"""
        if not self.scheduler.running:
            self.scheduler.add_job(
                self.broadcast_tokens_task,
                IntervalTrigger(seconds=self.interval_seconds),
                id='broadcast_tokens',
                name='Broadcast token list',
                replace_existing=True,
                max_instances=1
            )

            # Also run immediately on startup
            self.scheduler.add_job(
                self.broadcast_tokens_task,
                id='initial_broadcast',
                name='Initial token broadcast',
                replace_existing=True,
                max_instances=1
            )

            self.scheduler.start()
            logger.info(f"Scheduler started - Token broadcast every {self.interval_seconds} seconds")

    def stop(self):
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")

    def get_next_update_time(self) -> Optional[datetime]:
        """Get the time of next scheduled broadcast"""
        if not self.scheduler.running:
            return None
        job = self.scheduler.get_job('broadcast_tokens')
        if job and job.next_run_time:
            return job.next_run_time
        return None

    def get_status(self) -> dict:
        """Get scheduler status"""
        next_update = self.get_next_update_time()

        return {
            "scheduler_running": self.scheduler.running,
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "next_update": next_update.isoformat() if next_update else None,
            "interval_seconds": self.interval_seconds,
            "is_updating": self.is_updating,
            "last_token_count": self.last_token_count,
            "last_error": self.last_error
        }

# Singleton instance
scheduler_service = SchedulerService()
