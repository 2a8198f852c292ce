"""
Poller Service - Continuous sync polling.

Runs one sync cycle at a time: Sheet → Board, then Board → Sheet, then
waits POLL_INTERVAL_SECONDS before the next cycle. A stop request is
honoured at that wait; a cycle already running always completes.
"""

import asyncio
import logging
import signal
from datetime import datetime
from typing import Optional

from .config import config
from .sync_engine import SyncEngine, sync_engine

logger = logging.getLogger(__name__)


class Poller:
    """Async polling service for lead sync."""

    def __init__(self, engine: Optional[SyncEngine] = None, poll_interval: Optional[float] = None):
        self.engine = engine or sync_engine
        self.poll_interval = poll_interval if poll_interval is not None else config.POLL_INTERVAL_SECONDS
        self.running = False
        self._stop_event: Optional[asyncio.Event] = None

        # Stats
        self._cycles = 0
        self._writes = 0
        self._errors = 0
        self._last_cycle: Optional[datetime] = None

    def stop(self):
        """Request shutdown; takes effect at the next inter-cycle wait."""
        if self.running:
            logger.info("Stopping poller...")
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):
                # Not available on this platform / not the main thread
                logger.debug(f"Signal handler for {sig} not installed")

    async def run_cycle(self):
        """Run one full cycle in a worker thread. Never raises."""
        loop = asyncio.get_running_loop()
        try:
            to_board, to_sheet = await loop.run_in_executor(None, self.engine.run_cycle)
            self._writes += to_board.writes + to_sheet.writes
            self._errors += len(to_board.errors) + len(to_sheet.errors)
        except Exception as e:
            self._errors += 1
            logger.error(f"Error during sync cycle: {e}")

        self._cycles += 1
        self._last_cycle = datetime.now()

    async def _wait_interval(self):
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            pass

    async def run(self, max_cycles: Optional[int] = None, install_signals: bool = True):
        """Run cycles until stopped (or until max_cycles have completed)."""
        self.running = True
        self._stop_event = asyncio.Event()
        if install_signals:
            self._setup_signal_handlers()

        logger.info("=" * 60)
        logger.info("Lead Sync Poller Starting")
        logger.info("=" * 60)
        logger.info(f"  Poll interval: {self.poll_interval}s")
        logger.info(f"  Mapping file: {self.engine.store.path}")
        logger.info("=" * 60)

        try:
            await asyncio.get_running_loop().run_in_executor(None, self.engine.prepare_board)
        except Exception as e:
            logger.error(f"Could not ensure board lists: {e}")

        while self.running:
            await self.run_cycle()

            if max_cycles is not None and self._cycles >= max_cycles:
                break

            await self._wait_interval()

        self.running = False
        logger.info("Poller stopped")
        logger.info(f"Final stats: {self._cycles} cycles, {self._writes} writes, {self._errors} errors")

    def get_status(self) -> dict:
        """Get current poller status."""
        return {
            'running': self.running,
            'poll_interval': self.poll_interval,
            'stats': {
                'cycles': self._cycles,
                'writes': self._writes,
                'errors': self._errors,
                'last_cycle': self._last_cycle.isoformat() if self._last_cycle else None,
            },
        }

    def start(self):
        """Start the poller (blocking)."""
        asyncio.run(self.run())


def run_poller():
    """Entry point for running the poller."""
    poller = Poller()
    try:
        poller.start()
    except KeyboardInterrupt:
        logger.info("Poller stopped by user")
