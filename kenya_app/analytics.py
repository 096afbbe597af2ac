"""
Analytics sink.

Events are fire-and-forget: emit() never raises and never blocks on delivery.
The default sink logs each event and counts it in Prometheus.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from prometheus_client import Counter

from .settings import settings as set

EventSink = Callable[[str, Dict[str, Any]], None]

EVENTS = Counter("analytics_events_total", "Analytics events emitted", ["event"])

logger = logging.getLogger(__name__)


def log_event(name: str, properties: Dict[str, Any]) -> None:
    event = {
        **properties,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "platform": set.platform_tag,
    }
    EVENTS.labels(name).inc()
    logger.info("Analytics event: %s %s", name, event)


def emit(sink: Optional[EventSink], name: str, properties: Dict[str, Any]) -> None:
    """Deliver an event to sink; failures are logged and dropped."""
    if sink is None:
        return
    try:
        sink(name, properties)
    except Exception:
        logger.debug("Analytics sink failed for event %s", name, exc_info=True)
