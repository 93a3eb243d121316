"""Tests for DOT graph generation."""

from critpath.graph import GraphGenerator, GraphView
from critpath.scheduler import calculate_critical_path
from tests.conftest import PROJECT_START, ms, three_chain_network


def _computed():
    return calculate_critical_path(three_chain_network(), PROJECT_START).milestones


def test_all_view() -> None:
    dot = GraphGenerator(_computed(), title="p1").generate()
    assert dot.startswith("digraph p1 {")
    assert "rankdir=LR;" in dot
    assert '"b1" -> "b2";' in dot
    assert '"a1" -> "a2" [color="red", penwidth=2];' in dot
    assert "slack 13d" in dot
    assert dot.rstrip().endswith("}")


def test_critical_nodes_highlighted() -> None:
    dot = GraphGenerator(_computed()).generate()
    a2_line = next(line for line in dot.splitlines() if line.strip().startswith('"a2" ['))
    assert 'fillcolor="mistyrose"' in a2_line
    assert 'color="red"' in a2_line
    b2_line = next(line for line in dot.splitlines() if line.strip().startswith('"b2" ['))
    assert 'fillcolor="white"' in b2_line


def test_critical_path_view() -> None:
    dot = GraphGenerator(_computed()).generate(GraphView.CRITICAL_PATH)
    assert '"a3"' in dot
    assert '"b1"' not in dot
    assert '"a3" -> "end"' in dot


def test_unscheduled_milestones() -> None:
    dot = GraphGenerator([ms("a", 1), ms("b", 1, ["a"])]).generate()
    assert 'style="filled,dashed"' in dot
    assert 'fillcolor="lightgray"' in dot
    assert '"a" -> "b";' in dot


def test_labels_are_escaped() -> None:
    dot = GraphGenerator([ms("a", 1, name='Say "hi"')], title="my plan!").generate()
    assert "digraph myplan {" in dot
    assert 'label="Say \\"hi\\""' in dot
