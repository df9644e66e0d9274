"""
Reservation monitor

Each cycle loads the active watches, drops the ones alerted recently,
retires the expired ones, then checks the rest against Recreation.gov:
campground-month groups first, singletons after in throttled batches.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import pytz

from .grouping import WatchGroup, partition_watches
from ..api.client import APIError, RecGovAvailabilityClient
from ..common.config import Config
from ..common.models import CycleReport, RecordOutcome, WatchRecord, is_range_reservable
from ..common.notifications import WatchNotifier
from ..common.scheduler import chunked
from ..store import WatchStore

logger = logging.getLogger(__name__)


class ReservationMonitor:
    """
    Polls availability for every active watch and emails owners when their
    campsite opens up.
    
    Only one cycle runs at a time; a tick that arrives while a cycle is
    still in progress is skipped.
    """
    
    def __init__(
        self,
        store: WatchStore,
        client: RecGovAvailabilityClient,
        notifier: WatchNotifier,
        config: Config,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.client = client
        self.notifier = notifier
        self.config = config
        self.tz = pytz.timezone(config.monitor.timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self._running = False
        self._stopped = False
    
    @property
    def is_running(self) -> bool:
        return self._running
    
    def now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            now = self.tz.localize(now)
        return now
    
    # ========================================
    # Cycle
    # ========================================
    
    async def run_cycle(self) -> CycleReport:
        """Run one full monitoring cycle"""
        settings = self.config.monitor
        now = self.now()
        today = now.astimezone(self.tz).date()
        report = CycleReport(started_at=now)
        calls_before = self.client.upstream_calls
        
        records = await self.store.list_active()
        if not records:
            logger.info("No active reservations to monitor.")
            report.finished_at = self.now()
            return report
        
        suppression = timedelta(minutes=settings.notify_suppression_minutes)
        candidates = []
        for record in records:
            if record.notified_within(now, suppression):
                logger.debug(f"Watch {record.id} alerted at {record.last_success_sent_at}, skipping")
                report.record(RecordOutcome.SKIPPED)
                continue
            if record.is_expired(today):
                try:
                    await self._expire(record)
                except Exception as e:
                    logger.error(f"Error deactivating expired watch {record.id}: {e}", exc_info=True)
                    report.record(RecordOutcome.FAILED)
                else:
                    report.record(RecordOutcome.EXPIRED)
                continue
            candidates.append(record)
        
        report.candidates = len(candidates)
        groups, singletons = partition_watches(candidates)
        report.groups = len(groups)
        report.singletons = len(singletons)
        logger.info(
            f"Checking {len(candidates)} watches: {len(groups)} campground groups, "
            f"{len(singletons)} individual campsites"
        )
        
        for group in groups:
            for outcome in await self._process_group(group):
                report.record(outcome)
        
        for index, batch in enumerate(chunked(singletons, settings.batch_size)):
            if index > 0 and settings.batch_delay_ms:
                await asyncio.sleep(settings.batch_delay_ms / 1000)
            for outcome in await self._gather(batch, self._process_single):
                report.record(outcome)
        
        report.finished_at = self.now()
        report.upstream_calls = self.client.upstream_calls - calls_before
        logger.info(
            f"Monitoring cycle complete: {len(records)} active, {report.skipped} skipped, "
            f"{report.expired} expired, {report.notified} notified, {report.no_change} unchanged, "
            f"{report.failed} failed, {report.notify_failed} unsent"
        )
        return report
    
    async def _gather(self, records: List[WatchRecord], handler, *args) -> List[RecordOutcome]:
        """Run `handler` for each record concurrently; one failure never stops the others"""
        results = await asyncio.gather(
            *[handler(record, *args) for record in records],
            return_exceptions=True
        )
        outcomes = []
        for record, result in zip(records, results):
            if isinstance(result, Exception):
                logger.error(f"Error processing watch {record.id}: {result}", exc_info=result)
                outcomes.append(RecordOutcome.FAILED)
            else:
                outcomes.append(result)
        return outcomes
    
    async def _expire(self, record: WatchRecord):
        logger.info(
            f"Reservation monitoring ended - end date {record.end_date} has passed "
            f"for watch {record.id} (campsite {record.campsite_id}, {record.email_address})"
        )
        await self.store.deactivate(record.id)
    
    # ========================================
    # Per-record processing
    # ========================================
    
    async def _process_group(self, group: WatchGroup) -> List[RecordOutcome]:
        """One campground-month fetch, then every member decided against it"""
        logger.info(
            f"Fetching facility {group.facility_id} for {group.month_start:%Y-%m} "
            f"({len(group)} watches)"
        )
        try:
            by_campsite = await self.client.get_facility_month(group.facility_id, group.month_start)
        except APIError as e:
            logger.error(f"Group fetch failed for facility {group.facility_id} {group.month_start:%Y-%m}: {e}")
            return await self._gather(group.records, self._fail)
        
        return await self._gather(group.records, self._lookup_and_decide, by_campsite)
    
    async def _lookup_and_decide(
        self, record: WatchRecord, by_campsite: Dict[str, Dict]
    ) -> RecordOutcome:
        statuses = by_campsite.get(str(record.campsite_id))
        if statuses is None:
            logger.warning(
                f"Campsite {record.campsite_id} missing from facility {record.facility_id} response"
            )
            statuses = {}
        return await self._decide(record, statuses)
    
    async def _process_single(self, record: WatchRecord) -> RecordOutcome:
        try:
            statuses = await self.client.get_campsite_availability(record.campsite_id)
        except APIError as e:
            logger.error(
                f"Error checking availability for watch {record.id} (campsite {record.campsite_id}, "
                f"{record.start_date}..{record.end_date}): {e}"
            )
            return await self._fail(record)
        return await self._decide(record, statuses)
    
    async def _fail(self, record: WatchRecord) -> RecordOutcome:
        await self.store.increment_attempts(record.id)
        return RecordOutcome.FAILED
    
    async def _decide(self, record: WatchRecord, statuses: Dict) -> RecordOutcome:
        """Apply the range check, alert on success and count the attempt"""
        reservable = is_range_reservable(
            statuses, record.start_date, record.end_date,
            self.config.monitor.available_statuses
        )
        outcome = RecordOutcome.NO_CHANGE

        try:
            if reservable:
                logger.info(
                    f"Alert: Campsite {record.campsite_id} ({record.campsite_name} {record.campsite_number}) "
                    f"is now reservable for {record.start_date}..{record.end_date}"
                )
                if await self.notifier.notify_available(record):
                    # Email already sent
                    outcome = RecordOutcome.NOTIFIED
                    try:
                        await self.store.record_success(record.id, self.now())
                    except Exception as e:
                        logger.error(
                            f"Alert sent for watch {record.id} but recording it failed: {e}",
                            exc_info=True
                        )
                else:
                    outcome = RecordOutcome.NOTIFY_FAILED
            else:
                logger.debug(f"Campsite {record.campsite_id} not reservable for watch {record.id}")
        finally:
            await self.store.increment_attempts(record.id)
        return outcome
    
    # ========================================
    # Timer
    # ========================================
    
    async def tick(self) -> Optional[CycleReport]:
        """Run a cycle unless one is already in progress"""
        if self._running:
            logger.warning("Previous monitoring cycle still running, skipping this tick")
            return None
        self._running = True
        try:
            return await self.run_cycle()
        except Exception as e:
            logger.error(f"Error during reservation monitoring: {e}", exc_info=True)
            return None
        finally:
            self._running = False
    
    def stop(self):
        """Stop firing new ticks"""
        self._stopped = True
    
    async def run_forever(self):
        """
        Fire a tick every interval_seconds until stopped.
        
        Ticks keep a fixed cadence regardless of how long a cycle takes.
        """
        self._stopped = False
        interval = self.config.monitor.interval_seconds
        logger.info(f"Reservation monitoring process started (every {interval:g}s)")
        pending = set()
        
        try:
            while not self._stopped:
                task = asyncio.create_task(self.tick())
                pending.add(task)
                task.add_done_callback(pending.discard)
                await asyncio.sleep(interval)
        finally:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.info("Reservation monitoring stopped")
