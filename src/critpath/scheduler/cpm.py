"""Critical Path Method: forward and backward passes over a milestone graph."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from critpath.dates import add_business_days, add_calendar_days, days_between
from critpath.exceptions import InvalidTimingError, ValidationError
from critpath.logger import checks_enabled, get_logger
from critpath.models import OFFSET_BUSINESS, Milestone

from .config import AnchorFallback, SchedulerConfig, SinkAnchor
from .core import CPMResult
from .topology import build_successor_map, index_by_id, topological_sort

logger = get_logger()


class _PassContext:
    """Shared state for one calculation: config, anchors and collected warnings."""

    def __init__(
        self,
        config: SchedulerConfig,
        project_start_date: date | None,
        current_date: date,
    ):
        self.config = config
        self.project_start_date = project_start_date
        self.current_date = current_date
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def fallback_anchor(self, milestone: Milestone, reason: str) -> date:
        """Anchor used when nothing else determines a milestone's start."""
        if self.config.anchor_fallback == AnchorFallback.ERROR:
            raise InvalidTimingError(f"Milestone '{milestone.id}' cannot be anchored: {reason}")
        self.warn(
            f"Milestone '{milestone.id}' {reason}; anchoring at current date "
            f"{self.current_date.isoformat()}"
        )
        return self.current_date


def _duration_days(milestone: Milestone, ctx: _PassContext) -> int:
    """Duration in days: the fixed window span if both dates are set, else the duration field."""
    if milestone.has_fixed_window:
        return days_between(milestone.start_date, milestone.end_date)  # type: ignore[arg-type]
    if milestone.duration is None:
        ctx.warn(f"Milestone '{milestone.id}' has no fixed dates or duration; using 0 days")
        return 0
    if milestone.duration < 0:
        ctx.warn(f"Milestone '{milestone.id}' has negative duration {milestone.duration}; using 0")
        return 0
    return milestone.duration


def _earliest_start(
    milestone: Milestone, by_id: dict[str, Milestone], ctx: _PassContext
) -> date:
    if not milestone.dependencies:
        if milestone.start_date is not None:
            return milestone.start_date
        if ctx.project_start_date is not None:
            return ctx.project_start_date
        return ctx.fallback_anchor(milestone, "has no start date and the project has none")

    if milestone.custom_start_date is not None:
        return milestone.custom_start_date

    finishes = [
        dep.earliest_finish
        for dep_id in milestone.dependencies
        if (dep := by_id.get(dep_id)) is not None and dep.earliest_finish is not None
    ]
    if not finishes:
        return ctx.fallback_anchor(milestone, "has no resolvable dependencies")

    latest_dependency_finish = max(finishes)
    if milestone.start_date_offset_type == OFFSET_BUSINESS:
        return add_business_days(latest_dependency_finish, milestone.start_date_offset)
    return add_calendar_days(latest_dependency_finish, milestone.start_date_offset)


def _forward_pass(
    ordered: Sequence[Milestone],
    by_id: dict[str, Milestone],
    durations: dict[str, int],
    ctx: _PassContext,
) -> None:
    """Compute earliest start/finish in dependency-first order."""
    for milestone in ordered:
        earliest_start = _earliest_start(milestone, by_id, ctx)
        duration = durations[milestone.id]

        if milestone.has_fixed_window:
            if milestone.end_date >= earliest_start:  # type: ignore[operator]
                earliest_finish = milestone.end_date
            else:
                ctx.warn(
                    f"Milestone '{milestone.id}' fixed end {milestone.end_date.isoformat()} "
                    f"falls before its earliest start {earliest_start.isoformat()}; "
                    f"shifting its {duration}-day window"
                )
                earliest_finish = add_calendar_days(earliest_start, duration)
        else:
            earliest_finish = add_calendar_days(earliest_start, duration)

        milestone.earliest_start = earliest_start
        milestone.earliest_finish = earliest_finish
        logger.debug(
            "Forward %s: ES=%s EF=%s", milestone.id, earliest_start, earliest_finish
        )


def _backward_pass(
    ordered: Sequence[Milestone],
    by_id: dict[str, Milestone],
    durations: dict[str, int],
    project_end: date,
    config: SchedulerConfig,
) -> None:
    """Compute latest start/finish in successor-first order."""
    successors = build_successor_map(ordered)

    for milestone in reversed(ordered):
        assert milestone.earliest_finish is not None
        successor_starts = [
            start
            for succ_id in successors[milestone.id]
            if (start := by_id[succ_id].latest_start) is not None
        ]

        if successor_starts:
            latest_finish = min(successor_starts)
        elif not successors[milestone.id] and config.sink_anchor == SinkAnchor.PROJECT_END:
            latest_finish = project_end
        else:
            latest_finish = milestone.earliest_finish

        milestone.latest_finish = latest_finish
        milestone.latest_start = add_calendar_days(latest_finish, -durations[milestone.id])
        logger.debug(
            "Backward %s: LS=%s LF=%s", milestone.id, milestone.latest_start, latest_finish
        )


def calculate_critical_path(
    nodes: Sequence[Milestone],
    project_start_date: date | None = None,
    *,
    config: SchedulerConfig | None = None,
    current_date: date | None = None,
) -> CPMResult:
    """Compute earliest/latest windows, slack and criticality for every milestone.

    The input milestones are not modified; the result holds copies in input
    order with their computed fields populated.

    Args:
        nodes: All milestones of one project
        project_start_date: Anchor for root milestones without a fixed start date
        config: Scheduler configuration (threshold, fallbacks)
        current_date: Date used when no anchor is available (defaults to today)

    Returns:
        CPMResult with computed milestones, project end, critical sequence and warnings

    Raises:
        CircularDependencyError: If the dependency graph contains a cycle
        InvalidTimingError: If a milestone cannot be anchored and fallback is disabled
    """
    config = config or SchedulerConfig()
    if not nodes:
        return CPMResult()

    ctx = _PassContext(config, project_start_date, current_date or date.today())  # noqa: DTZ011

    working = [node.copy() for node in nodes]
    for milestone in working:
        milestone.clear_schedule()
    by_id = index_by_id(working)
    if len(by_id) != len(working):
        raise ValidationError("Milestone IDs must be unique within a project")

    ordered = topological_sort(working).require_complete()
    durations = {milestone.id: _duration_days(milestone, ctx) for milestone in ordered}

    _forward_pass(ordered, by_id, durations, ctx)

    project_end = max(m.earliest_finish for m in working if m.earliest_finish is not None)

    _backward_pass(ordered, by_id, durations, project_end, config)

    for milestone in working:
        assert milestone.earliest_start is not None
        assert milestone.latest_start is not None
        milestone.slack = days_between(milestone.earliest_start, milestone.latest_start)
        milestone.is_critical = milestone.slack <= config.critical_slack_threshold

    if checks_enabled():
        for milestone in working:
            logger.checks(
                "%s: ES=%s EF=%s LS=%s LF=%s slack=%d%s",
                milestone.id,
                milestone.earliest_start,
                milestone.earliest_finish,
                milestone.latest_start,
                milestone.latest_finish,
                milestone.slack,
                " (critical)" if milestone.is_critical else "",
            )

    critical_path = get_critical_path_sequence(working)
    logger.changes(
        "Critical path ends %s: %s", project_end.isoformat(), ", ".join(critical_path) or "(none)"
    )

    return CPMResult(
        milestones=working,
        project_end=project_end,
        critical_path=critical_path,
        warnings=ctx.warnings,
    )


def get_critical_path_sequence(milestones: Sequence[Milestone]) -> list[str]:
    """IDs of critical milestones ordered by earliest start."""
    critical = [m for m in milestones if m.is_critical]
    critical.sort(key=lambda m: m.earliest_start or date.min)
    return [m.id for m in critical]
