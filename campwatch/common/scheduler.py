"""
Pacing primitives for the availability monitor

Handles upstream cool-downs, bounded retries and batch throttling.
"""
import asyncio
import time
import logging
from typing import Iterator, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CooldownGate:
    """
    Shared pause for every upstream request.
    
    A rate-limit response suspends the gate; all callers awaiting it
    block until the cool-down deadline has passed.
    """
    
    def __init__(self):
        self._resume_at = 0.0
    
    def remaining(self) -> float:
        """Seconds left in the current cool-down"""
        return max(0.0, self._resume_at - time.monotonic())
    
    def suspend(self, seconds: float):
        """Pause all requests for `seconds`. Never shortens an active pause."""
        resume_at = time.monotonic() + seconds
        if resume_at > self._resume_at:
            self._resume_at = resume_at
            logger.warning(f"Upstream requests paused for {seconds:.0f}s")
    
    async def wait(self):
        """Wait until the gate is open"""
        while True:
            remaining = self.remaining()
            if remaining <= 0:
                return
            await asyncio.sleep(remaining)


class RetryStrategy:
    """
    Bounded attempt counter for retrying a single request.
    """
    
    def __init__(self, max_attempts: int = 4):
        self.max_attempts = max_attempts
        self.attempts = 0
    
    def should_retry(self) -> bool:
        """Check if another attempt should be made"""
        return self.attempts < self.max_attempts
    
    def record_attempt(self):
        """Record an attempt"""
        self.attempts += 1
    
    def reset(self):
        """Reset attempt counter"""
        self.attempts = 0


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive batches of at most `size` items"""
    if size < 1:
        raise ValueError("batch size must be positive")
    for i in range(0, len(items), size):
        yield list(items[i:i + size])
