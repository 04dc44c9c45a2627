"""
CPU Scheduling Algorithms Module

This module implements the scheduling strategies shared by every engine.
Each strategy is a small class that, once per tick, decides which entity
occupies the CPU. The engines own the clock and the bookkeeping; a strategy
only looks at the simulation state and returns an identifier (or None for
an idle tick).

Algorithms Implemented:
1. FCFS (First Come First Served) - head of the ready queue
2. LCFS (Last Come First Served) - tail of the ready queue
3. SJF (Shortest Job First) - shortest burst
4. LPT (Longest Processing Time) - longest burst
5. HRRN (Highest Response Ratio Next) - (wait + burst) / burst
6. SRT (Shortest Remaining Time) - preemptive, least remaining work
7. RPT (Remaining Processing Time) - preemptive, most remaining work
8. RR (Round Robin) - preemptive, fixed time quantum

OS Concepts Demonstrated:
- Preemptive vs Non-preemptive scheduling
- Ready queue ordering as the tie-break of last resort
- Time slicing with a per-run quantum counter

Author: Student
Date: October 2026
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any, Callable, Iterable, Iterator, Mapping, NamedTuple, Sequence, Union
from dataclasses import dataclass, field
import logging
import math

from config import SchedulingAlgorithm, ALGORITHM_DESCRIPTIONS
from validators import ConfigurationError

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# READY QUEUE AND SIMULATION STATE
# =============================================================================

class ReadyQueue:
    """
    Ordered queue of entity identifiers waiting for the CPU.

    Insertion order is meaningful: it is the FCFS/LCFS/RR order and the
    tie-break for every other strategy.
    """

    def __init__(self, items: Iterable[str] = ()):
        self._items: List[str] = list(items)

    def push_back(self, entity_id: str) -> None:
        self._items.append(entity_id)

    def push_front(self, entity_id: str) -> None:
        self._items.insert(0, entity_id)

    def remove(self, entity_id: str) -> bool:
        """Remove the first occurrence; returns False if absent."""
        try:
            self._items.remove(entity_id)
        except ValueError:
            return False
        return True

    def head(self) -> Optional[str]:
        return self._items[0] if self._items else None

    def tail(self) -> Optional[str]:
        return self._items[-1] if self._items else None

    def purge(self, predicate: Callable[[str], bool]) -> int:
        """
        Drop every entry matching predicate, keeping the others in order.

        Returns:
            Number of entries removed
        """
        kept = [item for item in self._items if not predicate(item)]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def replace(self, items: Iterable[str]) -> None:
        self._items = list(items)

    def to_list(self) -> List[str]:
        return list(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self) -> str:
        return f"ReadyQueue({self._items!r})"


class EntityMeta(NamedTuple):
    """Static timing of one schedulable entity, in ticks."""
    arrival: int
    burst: int


@dataclass
class SimulationState:
    """
    Mutable state of one engine invocation.

    first_start and completion are set at most once per entity.
    cs_remaining/cs_target describe a context switch in progress.
    """
    time: int = 0
    running: Optional[str] = None
    ready: ReadyQueue = field(default_factory=ReadyQueue)
    remaining: Dict[str, int] = field(default_factory=dict)
    first_start: Dict[str, Optional[int]] = field(default_factory=dict)
    completion: Dict[str, Optional[int]] = field(default_factory=dict)
    cs_remaining: int = 0
    cs_target: Optional[str] = None

    @classmethod
    def for_entities(cls, meta: Mapping[str, EntityMeta]) -> 'SimulationState':
        """Fresh state with every entity's full burst remaining."""
        return cls(
            remaining={pid: m.burst for pid, m in meta.items()},
            first_start={pid: None for pid in meta},
            completion={pid: None for pid in meta}
        )


@dataclass
class SchedulingContext:
    """What a strategy may look at when deciding."""
    state: SimulationState
    meta: Mapping[str, EntityMeta]
    quantum: Optional[int] = None


# =============================================================================
# SELECTION HELPERS
# =============================================================================

def pick_min(items: Sequence[str], score: Callable[[str], float]) -> str:
    """Lowest-scoring item; the first occurrence wins ties."""
    best = items[0]
    best_score = score(best)
    for item in items[1:]:
        s = score(item)
        if s < best_score:
            best, best_score = item, s
    return best


def pick_max(items: Sequence[str], score: Callable[[str], float]) -> str:
    """Highest-scoring item; the first occurrence wins ties."""
    best = items[0]
    best_score = score(best)
    for item in items[1:]:
        s = score(item)
        if s > best_score:
            best, best_score = item, s
    return best


def response_ratio(meta: EntityMeta, time: int) -> float:
    """HRRN priority: (waiting time + burst) / burst."""
    wait = max(0, time - meta.arrival)
    return (wait + meta.burst) / meta.burst


def select_candidate(
    algorithm: SchedulingAlgorithm,
    ready: Sequence[str],
    running: Optional[str],
    meta: Mapping[str, EntityMeta],
    remaining: Mapping[str, int],
    time: int
) -> Optional[str]:
    """
    Pure selection rule of every strategy.

    Non-preemptive strategies keep the running entity. Preemptive ones
    weigh the running entity against the ready queue. Round Robin falls
    back to the queue head here; its slice handling lives in
    RoundRobinScheduler.

    Args:
        algorithm: Strategy to apply
        ready: Ready entities in queue order
        running: Entity currently holding the CPU, if any
        meta: Static arrival/burst per entity
        remaining: Remaining work per entity
        time: Current tick

    Returns:
        Identifier of the chosen entity, or None to idle
    """
    if running is not None and not algorithm.is_preemptive:
        return running
    if not ready:
        return running

    ready = list(ready)
    if algorithm is SchedulingAlgorithm.FCFS:
        return ready[0]
    if algorithm is SchedulingAlgorithm.LCFS:
        return ready[-1]
    if algorithm is SchedulingAlgorithm.SJF:
        return pick_min(ready, lambda pid: meta[pid].burst)
    if algorithm is SchedulingAlgorithm.LPT:
        return pick_max(ready, lambda pid: meta[pid].burst)
    if algorithm is SchedulingAlgorithm.HRRN:
        return pick_max(ready, lambda pid: response_ratio(meta[pid], time))

    candidates = ready + [running] if running is not None else ready
    if algorithm is SchedulingAlgorithm.SRT:
        return pick_min(candidates, lambda pid: remaining[pid])
    if algorithm is SchedulingAlgorithm.RPT:
        return pick_max(candidates, lambda pid: remaining[pid])

    return ready[0]


# =============================================================================
# SCHEDULER BASE CLASS
# =============================================================================

class CPUScheduler(ABC):
    """
    Abstract base class for CPU scheduling strategies.

    The engine calls init() once per run, on_arrive() for every admitted
    entity, decide() once per executing tick and on_tick_end() after every
    tick. Only decide() is mandatory.
    """

    algorithm: SchedulingAlgorithm

    @property
    def algorithm_name(self) -> str:
        return self.algorithm.value

    @property
    def is_preemptive(self) -> bool:
        return self.algorithm.is_preemptive

    @property
    def requires_quantum(self) -> bool:
        return self.algorithm.requires_quantum

    @property
    def description(self) -> str:
        return ALGORITHM_DESCRIPTIONS[self.algorithm]

    def init(self, ctx: SchedulingContext) -> None:
        """Reset per-run scratch state."""

    def on_arrive(self, ctx: SchedulingContext, entity_id: str) -> None:
        """Called after an arriving entity joined the ready queue."""

    @abstractmethod
    def decide(self, ctx: SchedulingContext) -> Optional[str]:
        """
        Select the entity to occupy the CPU for the current tick.

        Returns:
            Entity identifier, or None to idle
        """
        pass

    def on_tick_end(self, ctx: SchedulingContext, executed: Optional[str]) -> None:
        """Called at the end of every tick with the entity that executed."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _SelectionScheduler(CPUScheduler):
    """Strategies fully described by select_candidate()."""

    def decide(self, ctx: SchedulingContext) -> Optional[str]:
        state = ctx.state
        return select_candidate(
            self.algorithm, state.ready, state.running,
            ctx.meta, state.remaining, state.time
        )


# =============================================================================
# NON-PREEMPTIVE STRATEGIES
# =============================================================================

class FCFSScheduler(_SelectionScheduler):
    """
    First Come First Served (FCFS) Scheduler

    Whoever entered the ready queue first gets the CPU and keeps it until
    completion. Suffers from the convoy effect: short jobs wait behind
    long ones.
    """
    algorithm = SchedulingAlgorithm.FCFS


class LCFSScheduler(_SelectionScheduler):
    """
    Last Come First Served (LCFS) Scheduler

    The most recent entry of the ready queue is picked when the CPU frees
    up. Non-preemptive.
    """
    algorithm = SchedulingAlgorithm.LCFS


class SJFScheduler(_SelectionScheduler):
    """
    Shortest Job First (SJF) Scheduler

    Picks the shortest burst when the CPU frees up. Optimal average waiting
    time among non-preemptive strategies, at the risk of starving long jobs.
    """
    algorithm = SchedulingAlgorithm.SJF


class LPTScheduler(_SelectionScheduler):
    """Longest Processing Time: picks the longest burst, non-preemptive."""
    algorithm = SchedulingAlgorithm.LPT


class HRRNScheduler(_SelectionScheduler):
    """
    Highest Response Ratio Next (HRRN) Scheduler

    Response ratio = (waiting time + burst) / burst. Waiting raises the
    ratio, so long jobs are eventually served.
    """
    algorithm = SchedulingAlgorithm.HRRN


# =============================================================================
# PREEMPTIVE STRATEGIES
# =============================================================================

class SRTScheduler(_SelectionScheduler):
    """
    Shortest Remaining Time (SRT) Scheduler

    Preemptive SJF: every tick the entity with the least remaining work
    runs, including the one already on the CPU.
    """
    algorithm = SchedulingAlgorithm.SRT


class RPTScheduler(_SelectionScheduler):
    """Remaining Processing Time: preemptive, most remaining work first."""
    algorithm = SchedulingAlgorithm.RPT


@dataclass
class RoundRobinState:
    """Round Robin scratch state for one run."""
    quantum: int = 1
    slice_left: int = 0
    current: Optional[str] = None


class RoundRobinScheduler(CPUScheduler):
    """
    Round Robin (RR) Scheduler

    Each entity runs for at most one quantum. When the slice is used up and
    work remains, the entity goes to the back of the ready queue. If nobody
    else is ready, the running entity keeps the CPU.
    """
    algorithm = SchedulingAlgorithm.RR

    def __init__(self):
        self.rr = RoundRobinState()

    @staticmethod
    def slice_length(quantum: Optional[float]) -> int:
        """Quantum in whole ticks, at least one."""
        return max(1, int(math.floor(quantum or 1)))

    def init(self, ctx: SchedulingContext) -> None:
        self.rr = RoundRobinState(quantum=self.slice_length(ctx.quantum))

    def decide(self, ctx: SchedulingContext) -> Optional[str]:
        state = ctx.state
        if state.running is not None and self.rr.slice_left > 0:
            return state.running

        head = state.ready.head()
        if head is None:
            return state.running

        self.rr.slice_left = self.rr.quantum
        self.rr.current = head
        return head

    def on_tick_end(self, ctx: SchedulingContext, executed: Optional[str]) -> None:
        if executed is None:
            return

        state = ctx.state
        self.rr.slice_left = max(0, self.rr.slice_left - 1)

        if state.remaining[executed] <= 0:
            # Completion closes the slice
            self.rr.slice_left = 0
            return

        if self.rr.slice_left == 0:
            state.ready.push_back(executed)
            if state.running == executed:
                state.running = None

    def __repr__(self) -> str:
        return f"RoundRobinScheduler(quantum={self.rr.quantum})"


# =============================================================================
# SCHEDULER FACTORY
# =============================================================================

def parse_algorithm(value: Union[str, SchedulingAlgorithm]) -> SchedulingAlgorithm:
    """
    Resolve a strategy identifier such as "rr" or "SRT".

    Raises:
        ConfigurationError: If the identifier is not one of the 8 strategies
    """
    if isinstance(value, SchedulingAlgorithm):
        return value
    try:
        return SchedulingAlgorithm(str(value).strip().upper())
    except ValueError:
        raise ConfigurationError(
            f"Unknown scheduling algorithm; expected one of "
            f"{', '.join(a.value for a in SchedulingAlgorithm)}",
            "algorithm", value
        ) from None


class SchedulerFactory:
    """
    Factory for creating CPU scheduler instances.

    Usage:
        scheduler = SchedulerFactory.create_scheduler(SchedulingAlgorithm.SJF)
        scheduler = SchedulerFactory.create_scheduler("rr")
    """

    SCHEDULERS = {
        SchedulingAlgorithm.FCFS: FCFSScheduler,
        SchedulingAlgorithm.LCFS: LCFSScheduler,
        SchedulingAlgorithm.RR: RoundRobinScheduler,
        SchedulingAlgorithm.SJF: SJFScheduler,
        SchedulingAlgorithm.SRT: SRTScheduler,
        SchedulingAlgorithm.HRRN: HRRNScheduler,
        SchedulingAlgorithm.LPT: LPTScheduler,
        SchedulingAlgorithm.RPT: RPTScheduler,
    }

    @staticmethod
    def create_scheduler(algorithm: Union[str, SchedulingAlgorithm]) -> CPUScheduler:
        """
        Create a scheduler instance based on the algorithm.

        Args:
            algorithm: Strategy enum member or its identifier

        Returns:
            A fresh CPUScheduler; strategy state is never shared between runs

        Raises:
            ConfigurationError: For unknown identifiers
        """
        algorithm = parse_algorithm(algorithm)
        logger.debug(f"Creating scheduler for {algorithm.value}")
        return SchedulerFactory.SCHEDULERS[algorithm]()

    @staticmethod
    def get_all_algorithms() -> List[SchedulingAlgorithm]:
        """Get all available scheduling algorithms."""
        return list(SchedulingAlgorithm)

    @staticmethod
    def get_algorithm_info() -> Dict[str, Dict[str, Any]]:
        """Get detailed info about all algorithms."""
        return {
            algo.value: {
                'preemptive': algo.is_preemptive,
                'requires_quantum': algo.requires_quantum,
                'description': ALGORITHM_DESCRIPTIONS[algo]
            }
            for algo in SchedulingAlgorithm
        }


__all__ = [
    'ReadyQueue',
    'EntityMeta',
    'SimulationState',
    'SchedulingContext',
    'pick_min',
    'pick_max',
    'response_ratio',
    'select_candidate',
    'CPUScheduler',
    'FCFSScheduler',
    'LCFSScheduler',
    'SJFScheduler',
    'LPTScheduler',
    'HRRNScheduler',
    'SRTScheduler',
    'RPTScheduler',
    'RoundRobinState',
    'RoundRobinScheduler',
    'parse_algorithm',
    'SchedulerFactory',
]
