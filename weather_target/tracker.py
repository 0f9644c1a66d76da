"""
Holds the game's current target.

A new selection runs as a background task. Its result replaces ``current``
only once it completes; a selection that is cancelled (player picked a spot on
the map, asked for another random target, or the server is shutting down)
never touches ``current``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from weather_target.models import Coordinate, TargetLocation, TargetSource
from weather_target.selection import LocationSelector

logger = logging.getLogger(__name__)


class TargetTracker:
    def __init__(self, selector: LocationSelector):
        self.selector = selector
        self.current: Optional[TargetLocation] = None
        self.updated_at: Optional[datetime] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def selecting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _commit(self, target: TargetLocation) -> None:
        self.current = target
        self.updated_at = datetime.now(timezone.utc)
        logger.info("Current target is now %s (%s)", target.name, target.source.value)

    async def refresh(self) -> Optional[TargetLocation]:
        """
        Replace the current target with a freshly selected one.
        Any selection already in flight is abandoned first.
        Returns None if this selection was superseded before it finished.
        """
        self.cancel()
        task = asyncio.create_task(self.selector.select_target())
        self._pending = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Caller went away; take the selection down with it
            task.cancel()
            raise
        finally:
            if self._pending is task:
                self._pending = None

        if task.cancelled():
            logger.info("Target selection superseded, keeping %s",
                        self.current.name if self.current else "no target")
            return None

        target = task.result()
        self._commit(target)
        return target

    def cancel(self) -> bool:
        """Abandon the in-flight selection, if any. Returns True if one was cancelled."""
        if not self.selecting:
            return False
        logger.debug("Cancelling in-flight target selection")
        self._pending.cancel()
        self._pending = None
        return True

    def set_manual(self, coordinate: Coordinate, name: str) -> TargetLocation:
        """Use a location the player chose instead of a random one."""
        self.cancel()
        target = TargetLocation(coordinate=coordinate, name=name, source=TargetSource.MANUAL)
        self._commit(target)
        return target
