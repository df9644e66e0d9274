"""
Recreation.gov availability client

Fetches per-date campsite availability one campsite at a time, or for a
whole campground month at once, pausing every request on rate limits.
"""
import logging
from datetime import date
from typing import Optional, Dict, Any, Iterable
import httpx
from dateutil import parser as date_parser

from .endpoints import Endpoints, DEFAULT_HEADERS
from ..common.config import Config
from ..common.models import AvailabilityResult
from ..common.scheduler import CooldownGate, RetryStrategy

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised when API request fails"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitedError(APIError):
    """Raised when cool-down retries are exhausted"""
    pass


def parse_availabilities(raw: Dict[str, str]) -> Dict[date, str]:
    """Convert {"2025-08-15T00:00:00Z": "Available"} into {date: status}"""
    statuses = {}
    for key, status in (raw or {}).items():
        try:
            statuses[date_parser.isoparse(key).date()] = status
        except (ValueError, TypeError):
            logger.debug(f"Skipping malformed availability key: {key!r}")
            continue
    return statuses


class RecGovAvailabilityClient:
    """
    Availability client for Recreation.gov.
    
    All instances sharing a CooldownGate back off together when any of
    them is rate limited.
    """
    
    def __init__(self, config: Config, gate: Optional[CooldownGate] = None):
        self.config = config
        self.endpoints = Endpoints(config.api.base_url)
        self.gate = gate or CooldownGate()
        self.client = httpx.AsyncClient(
            headers={**DEFAULT_HEADERS, **config.api.headers},
            timeout=config.api.timeout,
            follow_redirects=True
        )
        self.upstream_calls = 0
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, *args):
        await self.close()
    
    async def close(self):
        await self.client.aclose()
    
    async def _get_json(
        self,
        url: str,
        cooldown_seconds: float,
        retry_statuses: Iterable[int] = (429,)
    ) -> Dict[str, Any]:
        """
        GET a JSON document, waiting out cool-downs.
        
        A response whose status is in `retry_statuses` suspends the shared
        gate for `cooldown_seconds` and the same request is retried once the
        pause is over, up to `max_rate_limit_retries` times.
        """
        retry_statuses = set(retry_statuses)
        strategy = RetryStrategy(max_attempts=self.config.monitor.max_rate_limit_retries + 1)
        last_status = None
        
        while strategy.should_retry():
            strategy.record_attempt()
            await self.gate.wait()
            
            self.upstream_calls += 1
            try:
                response = await self.client.get(url)
            except httpx.HTTPError as e:
                raise APIError(f"Request to {url} failed: {e}") from e
            
            if response.status_code in retry_statuses:
                last_status = response.status_code
                logger.warning(
                    f"Upstream returned {response.status_code} for {url} "
                    f"(attempt {strategy.attempts}), pausing for {cooldown_seconds:.0f}s"
                )
                self.gate.suspend(cooldown_seconds)
                continue
            
            if response.status_code != 200:
                raise APIError(
                    f"Failed to get availability: {response.status_code}",
                    response.status_code,
                    response.text
                )
            
            try:
                return response.json()
            except ValueError as e:
                raise APIError(
                    f"Unparseable availability response from {url}",
                    response.status_code,
                    response.text
                ) from e
        
        if last_status == 429:
            raise RateLimitedError(
                f"Still rate limited after {strategy.attempts} attempts: {url}", 429
            )
        raise APIError(f"Upstream kept failing after {strategy.attempts} attempts: {url}", last_status)
    
    async def get_campsite_availability(self, campsite_id: str) -> Dict[date, str]:
        """
        Get the full availability calendar for one campsite.
        
        Returns:
            Dict mapping date to status string
        """
        data = await self._get_json(
            self.endpoints.campsite_availability_all(campsite_id),
            cooldown_seconds=self.config.monitor.rate_limit_pause_seconds
        )
        try:
            raw = data["availability"]["availabilities"]
        except (KeyError, TypeError) as e:
            raise APIError(f"Unexpected availability payload for campsite {campsite_id}") from e
        return parse_availabilities(raw)
    
    async def get_facility_month(self, facility_id: str, month: date) -> Dict[str, Dict[date, str]]:
        """
        Get availability for all campsites in a campground for one month.
        
        Rate limits and server errors pause every request for the group
        back-off period before the fetch is retried.
        
        Returns:
            Dict mapping campsite_id to {date: status}
        """
        data = await self._get_json(
            self.endpoints.campground_month(facility_id, month),
            cooldown_seconds=self.config.monitor.group_backoff_seconds,
            retry_statuses=(429, 500)
        )
        campsites = data.get("campsites") if isinstance(data, dict) else None
        if not isinstance(campsites, dict):
            raise APIError(f"Unexpected campground payload for facility {facility_id}")
        
        return {
            str(site_id): parse_availabilities(site_data.get("availabilities", {}))
            for site_id, site_data in campsites.items()
        }
    
    async def check_campsite(self, campsite_id: str, start: date, end: date) -> AvailabilityResult:
        """Fetch one campsite and decide whether [start, end) is reservable"""
        statuses = await self.get_campsite_availability(campsite_id)
        result = AvailabilityResult.from_statuses(
            campsite_id, statuses, start, end, self.config.monitor.available_statuses
        )
        logger.info(f"Campsite {campsite_id} reservable for {start}..{end}: {result.is_reservable}")
        return result
