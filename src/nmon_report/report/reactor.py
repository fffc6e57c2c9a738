from __future__ import annotations

import logging

from nmon_report.granularity import GranularityAdvisor
from nmon_report.interval import IntervalEvent, IntervalEventKind, IntervalManager
from nmon_report.viz.builder import ChartBuilder

LOGGER = logging.getLogger(__name__)


class IntervalReactor:
    """Keeps the builder's render settings in step with the current interval.

    Only ``CURRENT_CHANGED`` affects rendering; granularity depends on which
    interval is active, not on which intervals exist.
    """

    def __init__(self, builder: ChartBuilder, advisor: GranularityAdvisor) -> None:
        self._builder = builder
        self._advisor = advisor
        self._publisher: IntervalManager | None = None
        self._reacting = False

    @property
    def reacting(self) -> bool:
        return self._reacting

    def subscribe(self, publisher: IntervalManager) -> None:
        if self._publisher is not None:
            self.unsubscribe()
        publisher.subscribe(self.handle)
        self._publisher = publisher

    def unsubscribe(self) -> None:
        if self._publisher is None:
            return
        self._publisher.unsubscribe(self.handle)
        self._publisher = None

    def handle(self, event: IntervalEvent) -> None:
        if event.kind is IntervalEventKind.CURRENT_CHANGED:
            self._on_current_interval_changed(event)
        elif event.kind in (
            IntervalEventKind.ADDED,
            IntervalEventKind.REMOVED,
            IntervalEventKind.RENAMED,
            IntervalEventKind.CLEARED,
        ):
            return
        else:  # pragma: no cover
            raise ValueError(f"Unsupported interval event: {event.kind}")

    def _on_current_interval_changed(self, event: IntervalEvent) -> None:
        if event.interval is None:
            raise ValueError("current interval change requires an interval")
        self._reacting = True
        try:
            granularity = self._advisor.recalculate(event.interval)
            self._builder.update_settings(
                interval=event.interval,
                granularity_seconds=granularity,
            )
            LOGGER.debug(
                "render settings updated for interval '%s' at %ss granularity",
                event.interval.name,
                granularity,
            )
        finally:
            self._reacting = False
