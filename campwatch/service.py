"""
Process-wide wiring of the monitor and its collaborators
"""
import logging
from typing import Optional

from .api.client import RecGovAvailabilityClient
from .common.config import Config
from .common.notifications import NotificationProvider, WatchNotifier, build_notifier
from .monitor import ReservationMonitor
from .store import WatchStore

logger = logging.getLogger(__name__)


class MonitorService:
    """
    Long-lived service object built once at process start.
    
    Owns the watch store, the availability client and the notifier, and
    hands them to the monitor.
    """
    
    def __init__(self, config: Config, provider: Optional[NotificationProvider] = None):
        self.config = config
        self.store = WatchStore(config.database.url)
        self.client = RecGovAvailabilityClient(config)
        self.notifier: WatchNotifier = build_notifier(config, provider)
        self.monitor = ReservationMonitor(self.store, self.client, self.notifier, config)
    
    async def __aenter__(self):
        await self.store.init()
        return self
    
    async def __aexit__(self, *args):
        await self.close()
    
    async def close(self):
        self.monitor.stop()
        await self.client.close()
        await self.notifier.close()
        await self.store.close()
