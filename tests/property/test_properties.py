"""
Property-based tests for core invariants using Hypothesis.

These tests stress the calendar, the command engine and lane packing with
random inputs to find edge cases.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from roadmap import engine
from roadmap.contracts import enforce_invariants
from roadmap.errors import DuplicateNameError, FormatError, RoadmapError
from roadmap.lanes import lane_count, pack_lanes
from roadmap.models import Snapshot, Task
from roadmap.quarters import (
    MAX_YEAR,
    MIN_YEAR,
    Quarter,
    compare,
    format_label,
    from_index,
    parse_label,
    quarter_range,
    to_index,
)
from roadmap.validation import normalize_name

quarters = st.builds(
    Quarter,
    year=st.integers(min_value=MIN_YEAR, max_value=MAX_YEAR),
    quarter_number=st.integers(min_value=1, max_value=4),
)

# ============================================================================
# Calendar Properties
# ============================================================================


@given(quarters)
def test_label_roundtrip(q: Quarter):
    """parse_label(format_label(q)) == q"""
    assert parse_label(format_label(q)) == q


@given(quarters)
def test_index_roundtrip(q: Quarter):
    """from_index(to_index(q)) == q"""
    assert from_index(to_index(q)) == q


@given(st.integers(min_value=-100_000, max_value=100_000), st.integers(min_value=1, max_value=4))
def test_any_year_either_rejected_or_roundtrips(year: int, number: int):
    """Every Quarter that can be built has a label that parses back to it."""
    try:
        q = Quarter(year, number)
    except FormatError:
        assert not MIN_YEAR <= year <= MAX_YEAR
        return
    assert parse_label(format_label(q)) == q


@given(quarters, quarters)
def test_compare_antisymmetric(a: Quarter, b: Quarter):
    assert compare(a, b) == -compare(b, a)
    assert compare(a, a) == 0


@given(quarters, st.integers(min_value=0, max_value=40))
def test_range_length_and_order(start: Quarter, extra: int):
    end = from_index(min(to_index(start) + extra, to_index(Quarter(MAX_YEAR, 4))))
    result = quarter_range(start, end)
    assert len(result) == to_index(end) - to_index(start) + 1
    indices = [to_index(q) for q in result]
    assert indices == sorted(indices)
    assert result[0] == start and result[-1] == end


# ============================================================================
# Normalization Idempotence
# ============================================================================


@given(st.text(max_size=50))
def test_normalization_idempotent(raw: str):
    once = normalize_name(raw)
    assert normalize_name(once) == once


# ============================================================================
# Name Uniqueness
# ============================================================================

names = st.text(alphabet="abcAB ", min_size=1, max_size=8).filter(lambda s: s.strip())


@given(names, st.sampled_from(["upper", "lower", "padded"]))
def test_team_name_variants_always_collide(name: str, variant: str):
    snapshot = engine.create_team(Snapshot(), name)
    candidate = {
        "upper": name.upper(),
        "lower": name.lower(),
        "padded": f"  {name.replace(' ', '   ')}  ",
    }[variant]
    try:
        engine.create_team(snapshot, candidate)
    except DuplicateNameError:
        return
    raise AssertionError(f"{candidate!r} did not collide with {name!r}")


# ============================================================================
# Engine Sequences Keep Indices Consistent
# ============================================================================

operations = st.lists(
    st.tuples(
        st.sampled_from(
            ["timeline", "team", "task", "move", "delete_task", "delete_team", "delete_timeline"]
        ),
        st.integers(min_value=0, max_value=5),
        st.integers(min_value=0, max_value=5),
        st.integers(min_value=0, max_value=11),
    ),
    max_size=30,
)


def _pick(ids, position):
    return ids[position % len(ids)] if ids else "missing"


def _step(snapshot: Snapshot, op: str, a: int, b: int, c: int) -> Snapshot:
    timelines = list(snapshot.timeline_order)
    teams = list(snapshot.team_order)
    tasks = sorted(snapshot.tasks)
    match op:
        case "timeline":
            return engine.create_timeline(snapshot, f"Timeline {a}")
        case "team":
            return engine.create_team(snapshot, f"Team {a}")
        case "task":
            start = from_index(c)
            end = from_index(c + b)
            return engine.create_task(
                snapshot, _pick(timelines, a), _pick(teams, b), f"Task {a}{b}{c}", 0, start, end
            )
        case "move":
            return engine.update_task(
                snapshot,
                _pick(tasks, a),
                timeline_id=_pick(timelines, b),
                team_id=_pick(teams, c),
            )
        case "delete_task":
            return engine.delete_task(snapshot, _pick(tasks, a))
        case "delete_team":
            return engine.delete_team(snapshot, _pick(teams, a))
        case _:
            return engine.delete_timeline(snapshot, _pick(timelines, a))


@settings(max_examples=200)
@given(operations)
def test_command_sequences_never_leave_dangling_tasks(ops):
    snapshot = Snapshot()
    for op, a, b, c in ops:
        before = snapshot
        try:
            snapshot = _step(snapshot, op, a, b, c)
        except RoadmapError:
            assert snapshot is before
        assert enforce_invariants(snapshot) == []


# ============================================================================
# Lane Packing
# ============================================================================

intervals = st.lists(
    st.tuples(st.integers(min_value=0, max_value=15), st.integers(min_value=0, max_value=6)),
    max_size=25,
)


def _tasks(spans) -> list[Task]:
    return [
        Task(
            id=f"t{i}",
            name=f"t{i}",
            team_id="team",
            start_quarter=from_index(start),
            end_quarter=from_index(start + length),
            progress=0,
        )
        for i, (start, length) in enumerate(spans)
    ]


@given(intervals)
def test_packing_never_overlaps_within_lane(spans):
    assignments = pack_lanes(_tasks(spans))
    assert len(assignments) == len(spans)
    by_lane: dict[int, list[tuple[int, int]]] = {}
    for a in assignments:
        by_lane.setdefault(a.lane_index, []).append((a.start_index, a.end_index))
    for ranges in by_lane.values():
        ranges.sort()
        for (_, prev_end), (next_start, _) in zip(ranges, ranges[1:]):
            assert prev_end < next_start


@given(intervals)
def test_packing_uses_minimum_lanes(spans):
    """Lane count equals the maximum number of tasks covering one quarter."""
    tasks = _tasks(spans)
    depth = 0
    for quarter in range(0, 22):
        covering = sum(1 for start, length in spans if start <= quarter <= start + length)
        depth = max(depth, covering)
    assert lane_count(pack_lanes(tasks)) == depth
