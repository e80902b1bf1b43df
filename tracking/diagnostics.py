#!/usr/bin/env python3
"""
Per-frame collection of tracking events, forwarded to an optional warning sink
"""

import logging
import math
from typing import Callable, List, Optional

from tracking.types import EventKind, TrackingEvent

logger = logging.getLogger(__name__)

WarningCallback = Callable[[str], None]


class DiagnosticLog:
    """Ordered events of the current frame plus the registered sink"""

    def __init__(self, callback: Optional[WarningCallback] = None):
        self.callback = callback
        self.events: List[TrackingEvent] = []
        self.timestamp: Optional[float] = None

    def set_callback(self, callback: Optional[WarningCallback]):
        self.callback = callback

    def begin_frame(self, timestamp: Optional[float]):
        self.events = []
        self.timestamp = timestamp

    def emit(
        self,
        object_name: str,
        kind: EventKind,
        quantity: str = "",
        measured: float = math.nan,
        bound: float = math.nan
    ) -> TrackingEvent:
        event = TrackingEvent(
            object_name=object_name,
            kind=kind,
            quantity=quantity,
            measured=float(measured),
            bound=float(bound),
            timestamp=self.timestamp
        )
        self.events.append(event)

        message = event.message()
        logger.debug(message)
        if self.callback is not None:
            self.callback(message)

        return event
