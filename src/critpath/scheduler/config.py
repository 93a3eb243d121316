"""Configuration classes for the scheduling system."""

from enum import Enum

from pydantic import BaseModel, Field


class AnchorFallback(str, Enum):
    """What to do when a root milestone has no start date and no project anchor."""

    TODAY = "today"  # Anchor at the current date and record a warning
    ERROR = "error"  # Raise InvalidTimingError


class SinkAnchor(str, Enum):
    """Where the backward pass anchors milestones that nothing depends on."""

    OWN_FINISH = "own_finish"  # latest_finish = the milestone's own earliest_finish
    PROJECT_END = "project_end"  # latest_finish = the overall project end


class SchedulerConfig(BaseModel):
    """Configuration for the critical path calculation."""

    # Milestones with slack at or below this many days are critical
    critical_slack_threshold: float = Field(default=0.5, ge=0)

    anchor_fallback: AnchorFallback = AnchorFallback.TODAY
    sink_anchor: SinkAnchor = SinkAnchor.OWN_FINISH
