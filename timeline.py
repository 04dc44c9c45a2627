"""
Timeline Module for CPU Scheduling Simulator

A timeline is the Gantt chart of one execution resource: an ordered list of
segments, each a half-open interval [start, end) tagged with what occupied
the resource. Ticks are appended one at a time and run-length merged, so two
adjacent segments never carry the same tag.

Author: Student
Date: October 2026
"""

from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Iterator

from config import CONTEXT_SWITCH_TAGS


@dataclass
class Segment:
    """
    One contiguous interval on a timeline.

    Attributes:
        pid: Entity identifier, a context switch tag ("CS-P"/"CS-T"),
             or None for idle
        start: First tick of the interval
        end: Tick after the last one (exclusive)
    """
    pid: Optional[str]
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def is_idle(self) -> bool:
        return self.pid is None

    @property
    def is_context_switch(self) -> bool:
        return self.pid in CONTEXT_SWITCH_TAGS

    @property
    def is_busy(self) -> bool:
        """Whether the resource did useful work during this segment."""
        return not self.is_idle and not self.is_context_switch

    def to_dict(self) -> Dict[str, Any]:
        return {'pid': self.pid, 'start': self.start, 'end': self.end}


class Timeline:
    """
    Run-length encoded record of one resource's ticks.

    Usage:
        timeline = Timeline()
        timeline.record("P1", 0)
        timeline.record("P1", 1)   # extends the P1 segment to [0, 2)
        timeline.record(None, 2)   # idle tick
    """

    def __init__(self, segments: Optional[List[Segment]] = None):
        self.segments: List[Segment] = list(segments) if segments else []

    def record(self, pid: Optional[str], time: int) -> None:
        """
        Append a single tick starting at `time`.

        The tick extends the last segment when the tag matches and the
        intervals touch; otherwise a new segment starts.
        """
        last = self.segments[-1] if self.segments else None
        if last is None or last.pid != pid or last.end != time:
            self.segments.append(Segment(pid=pid, start=time, end=time + 1))
        else:
            last.end += 1

    @property
    def end(self) -> float:
        """End of the last segment (0 for an empty timeline)."""
        return self.segments[-1].end if self.segments else 0

    def busy_time(self) -> float:
        """Ticks spent executing entities (idle and context switch excluded)."""
        return sum(s.duration for s in self.segments if s.is_busy)

    def context_switch_time(self) -> float:
        return sum(s.duration for s in self.segments if s.is_context_switch)

    def idle_time(self) -> float:
        return sum(s.duration for s in self.segments if s.is_idle)

    def scaled(self, time_scale) -> 'Timeline':
        """Return a copy with every boundary converted back to caller time."""
        return Timeline([
            Segment(pid=s.pid, start=time_scale.to_time(s.start), end=time_scale.to_time(s.end))
            for s in self.segments
        ])

    def to_list(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.segments]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index):
        return self.segments[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timeline):
            return NotImplemented
        return self.segments == other.segments

    def __repr__(self) -> str:
        parts = ", ".join(f"{s.pid or 'IDLE'}:{s.start}-{s.end}" for s in self.segments)
        return f"Timeline([{parts}])"
