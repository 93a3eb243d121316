"""Graph generation for critpath."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from .models import Milestone


class GraphView(Enum):
    """Types of graph views available."""

    ALL = "all"
    CRITICAL_PATH = "critical-path"


CRITICAL_STYLE = {"fill_color": "mistyrose", "border_color": "red", "border_width": 2}
NORMAL_STYLE = {"fill_color": "white"}
UNSCHEDULED_STYLE = {"fill_color": "lightgray", "style": "dashed"}


class GraphGenerator:
    """Generate milestone dependency graphs in DOT format.

    Milestones should carry computed fields (from a recalculation) for the
    critical path to be highlighted; unscheduled milestones render greyed out.
    """

    def __init__(self, milestones: Sequence[Milestone], title: str = "Milestones"):
        self.milestones = list(milestones)
        self.title = title

    def generate(self, view: GraphView = GraphView.ALL) -> str:
        """Generate a DOT graph based on the specified view."""
        if view == GraphView.ALL:
            return self._render(self.milestones)
        if view == GraphView.CRITICAL_PATH:
            return self._render([m for m in self.milestones if m.is_critical])
        raise ValueError(f"Unknown view: {view}")

    def _render(self, milestones: list[Milestone]) -> str:
        included = {m.id for m in milestones}
        critical = {m.id for m in milestones if m.is_critical}

        lines = [f"digraph {self._graph_name()} {{"]
        lines.append("  rankdir=LR;")
        lines.append("  node [shape=box];")
        lines.append("")

        for milestone in milestones:
            lines.append(f"  {self._format_node(milestone)}")
        lines.append("")

        # Edges run from a dependency to the milestone waiting on it
        lines.append("  // Dependencies")
        for milestone in milestones:
            for dep_id in milestone.dependencies:
                if dep_id not in included:
                    continue
                on_path = dep_id in critical and milestone.id in critical
                lines.append(f"  {self._format_edge(dep_id, milestone.id, on_path)}")

        lines.append("}")
        return "\n".join(lines)

    def _graph_name(self) -> str:
        name = "".join(ch for ch in self.title if ch.isalnum() or ch == "_")
        return name or "Milestones"

    def _escape_label(self, label: str) -> str:
        """Escape special characters in DOT labels."""
        return label.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")

    def _quote_id(self, node_id: str) -> str:
        return f'"{self._escape_label(node_id)}"'

    def _label(self, milestone: Milestone) -> str:
        label = milestone.name or milestone.id
        if milestone.earliest_start is not None and milestone.earliest_finish is not None:
            label += (
                f"\n{milestone.earliest_start.isoformat()} - "
                f"{milestone.earliest_finish.isoformat()}"
            )
        if milestone.slack is not None:
            label += f"\nslack {milestone.slack}d"
        return label

    def _style(self, milestone: Milestone) -> dict[str, Any]:
        if not milestone.is_scheduled:
            return dict(UNSCHEDULED_STYLE)
        if milestone.is_critical:
            return dict(CRITICAL_STYLE)
        return dict(NORMAL_STYLE)

    def _format_node(self, milestone: Milestone) -> str:
        style = self._style(milestone)
        attrs = [f'label="{self._escape_label(self._label(milestone))}"']
        styles = ["filled"]
        if "style" in style:
            styles.append(style["style"])
        attrs.append(f'style="{",".join(styles)}"')
        attrs.append(f'fillcolor="{style["fill_color"]}"')
        if "border_color" in style:
            attrs.append(f'color="{style["border_color"]}"')
        if "border_width" in style:
            attrs.append(f"penwidth={style['border_width']}")

        return f"{self._quote_id(milestone.id)} [{', '.join(attrs)}];"

    def _format_edge(self, from_id: str, to_id: str, critical: bool) -> str:
        edge = f"{self._quote_id(from_id)} -> {self._quote_id(to_id)}"
        if critical:
            return f'{edge} [color="red", penwidth=2];'
        return f"{edge};"
