"""
Multi-Core Simulation Module for CPU Scheduling Simulator

Generalizes the tick loop to N processors. Every processor keeps its own
running process, context switch sub-state and timeline; the ready queue
is shared.

Two assignment disciplines:

1. Slot-greedy (LPT, RPT): a process keeps its processor until it
   finishes. Each free processor takes a new process from the ready queue
   (LPT: longest burst, RPT: shortest burst), paying the context switch
   cost when it last ran a different process.

2. Global priority (every other strategy): each tick, ready and running
   processes are sorted by descending remaining time (running first on
   ties, then arrival, then id in dictionary order: case-insensitive, with
   "b" before "B") and the top N run. Processes that stay in
   the top N keep their processor. No context switch cost is charged.

OS Concepts:
- Symmetric multiprocessing with a shared ready queue
- Processor affinity (retained occupants keep their slot)
- Per-processor context switching overhead

Author: Student
Date: October 2026
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Union
from collections import deque
import logging
import math

from config import (
    SchedulingAlgorithm,
    SimulationConfig,
    DEFAULT_SIMULATION_CONFIG,
    CONTEXT_SWITCH_PROCESS,
    SLOT_GREEDY_ALGORITHMS
)
from process import Process
from scheduling_algorithms import EntityMeta, SimulationState, pick_max, pick_min, parse_algorithm
from simulation import EngineStatus, SimulationResult
from time_scale import TimeScale
from timeline import Timeline
from metrics import MetricsCalculator
from validators import (
    ConfigValidator,
    WorkloadValidator,
    WorkloadError,
    SimulationError,
    require_non_negative,
    log_validation_result
)

logger = logging.getLogger(__name__)


@dataclass
class Processor:
    """
    One execution slot.

    Attributes:
        core_id: Index of the processor
        running: Process occupying the processor
        cs_remaining: Ticks left in the current context switch
        cs_target: Process installed when the context switch ends
        last_executed: Process executed on the previous tick
        timeline: Gantt chart of this processor
    """
    core_id: int
    running: Optional[str] = None
    cs_remaining: int = 0
    cs_target: Optional[str] = None
    last_executed: Optional[str] = None
    timeline: Timeline = field(default_factory=Timeline)

    @property
    def is_switching(self) -> bool:
        return self.cs_remaining > 0 or self.cs_target is not None

    def get_state(self) -> Dict[str, Any]:
        return {
            'core_id': self.core_id,
            'running': self.running,
            'context_switch_remaining': self.cs_remaining,
            'context_switch_target': self.cs_target
        }


@dataclass
class MultiCoreResult(SimulationResult):
    """
    Results of a multi-core run.

    timeline is the first processor's timeline; timelines holds all of them.
    """
    timelines: List[Timeline] = field(default_factory=list)
    cores: int = 1

    def unscaled(self, time_scale: TimeScale) -> 'MultiCoreResult':
        if time_scale.is_identity:
            return self
        timelines = [t.scaled(time_scale) for t in self.timelines]
        return MultiCoreResult(
            algorithm=self.algorithm,
            timeline=timelines[0] if timelines else Timeline(),
            process_metrics=MetricsCalculator.unscale_process_metrics(
                self.process_metrics, time_scale
            ),
            summary=MetricsCalculator.unscale_summary(
                self.summary, time_scale, len(self.process_metrics)
            ),
            truncated=self.truncated,
            ticks=self.ticks,
            timelines=timelines,
            cores=self.cores
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['cores'] = self.cores
        data['timelines'] = [t.to_list() for t in self.timelines]
        return data


class MultiCoreEngine:
    """
    Multi-core tick engine (integer ticks only).

    Usage:
        engine = MultiCoreEngine(config)
        engine.initialize(processes, cores=2, algorithm=SchedulingAlgorithm.LPT)
        result = engine.run()
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self.algorithm: Optional[SchedulingAlgorithm] = None
        self.processors: List[Processor] = []
        self.meta: Dict[str, EntityMeta] = {}
        self.pending: deque = deque()
        self.state = SimulationState()
        self.context_switch = 0
        self.max_ticks = self.config.max_ticks
        self.completed_count = 0
        self.ticks = 0
        self.status = EngineStatus.IDLE

    def initialize(self, processes: List[Process], cores: int,
                   algorithm: Union[str, SchedulingAlgorithm],
                   context_switch: int = 0,
                   max_ticks: Optional[int] = None):
        """
        Prepare a fresh run.

        Args:
            processes: Workload with integer arrival and burst ticks
            cores: Number of processors (at least 1)
            algorithm: Scheduling strategy; selects the assignment discipline
            context_switch: Context switch cost in ticks (slot-greedy only)
            max_ticks: Tick budget (defaults to config.max_ticks)
        """
        self.algorithm = parse_algorithm(algorithm)
        num_cores = max(1, int(math.floor(cores)))
        self.processors = [Processor(core_id=i) for i in range(num_cores)]
        self.meta = {p.pid: EntityMeta(p.arrival_time, p.burst_time) for p in processes}
        self.pending = deque(sorted(processes, key=lambda p: p.arrival_time))
        self.state = SimulationState.for_entities(self.meta)
        self.context_switch = max(0, int(context_switch or 0))
        self.max_ticks = require_non_negative(
            self.config.max_ticks if max_ticks is None else max_ticks, "max_ticks"
        )
        self.completed_count = 0
        self.ticks = 0
        self.status = EngineStatus.COMPLETED if not self.meta else EngineStatus.IDLE

        discipline = "slot-greedy" if self.is_slot_greedy else "global priority"
        logger.info(
            f"Initialized {self.algorithm.value} run on {num_cores} cores ({discipline}): "
            f"{len(self.meta)} processes, context_switch={self.context_switch}"
        )

    @property
    def is_slot_greedy(self) -> bool:
        return self.algorithm in SLOT_GREEDY_ALGORITHMS

    def step(self) -> bool:
        """
        Execute one tick on every processor.

        Returns:
            True if the simulation should continue, False if done
        """
        if self.algorithm is None:
            raise SimulationError("initialize() must be called before step()", "status",
                                  self.status.value)
        if self.is_complete() or self._check_finished():
            return False
        self.status = EngineStatus.RUNNING

        state = self.state
        while self.pending and self.pending[0].arrival_time <= state.time:
            state.ready.push_back(self.pending.popleft().pid)

        state.ready.purge(lambda pid: state.remaining[pid] <= 0)

        if self.is_slot_greedy:
            self._assign_slot_greedy()
        else:
            self._assign_global_priority()

        for processor in self.processors:
            self._execute(processor)

        state.time += 1
        self.ticks += 1
        return not self._check_finished()

    def _assign_slot_greedy(self):
        """LPT/RPT: fill free processors, occupants keep theirs."""
        state = self.state
        for processor in self.processors:
            if processor.is_switching:
                continue
            if processor.running is not None and state.remaining[processor.running] > 0:
                continue
            processor.running = None

        for processor in self.processors:
            if processor.is_switching or processor.running is not None:
                continue
            if not state.ready:
                break

            candidates = state.ready.to_list()
            if self.algorithm is SchedulingAlgorithm.LPT:
                pick = pick_max(candidates, lambda pid: self.meta[pid].burst)
            else:
                pick = pick_min(candidates, lambda pid: self.meta[pid].burst)
            state.ready.remove(pick)

            if (self.context_switch > 0 and processor.last_executed is not None
                    and pick != processor.last_executed):
                processor.cs_remaining = self.context_switch
                processor.cs_target = pick
            else:
                processor.running = pick
            logger.debug(f"t={state.time}: core {processor.core_id} takes {pick}")

    def _priority_key(self, pid: str, running: set):
        # Ids compare case-insensitively; on a case-only difference lowercase wins
        return (-self.state.remaining[pid], pid not in running, self.meta[pid].arrival,
                pid.casefold(), pid.swapcase())

    def _assign_global_priority(self):
        """Re-sort ready and running processes; the top N occupy the processors."""
        state = self.state
        running = {p.running for p in self.processors if p.running is not None}
        candidates = list(dict.fromkeys(state.ready.to_list() + [
            p.running for p in self.processors if p.running is not None
        ]))
        ordered = sorted(candidates, key=lambda pid: self._priority_key(pid, running))
        assigned = set(ordered[:len(self.processors)])

        next_running: List[Optional[str]] = [None] * len(self.processors)
        for i, processor in enumerate(self.processors):
            if processor.running in assigned:
                next_running[i] = processor.running
                assigned.discard(processor.running)

        entrants = iter([pid for pid in ordered if pid in assigned])
        for i in range(len(next_running)):
            if next_running[i] is None:
                next_running[i] = next(entrants, None)

        for processor, pid in zip(self.processors, next_running):
            processor.running = pid

        occupied = set(pid for pid in next_running if pid is not None)
        state.ready.replace(pid for pid in ordered if pid not in occupied)

    def _execute(self, processor: Processor):
        state = self.state
        if processor.cs_remaining > 0:
            processor.timeline.record(CONTEXT_SWITCH_PROCESS, state.time)
            processor.cs_remaining -= 1
            if processor.cs_remaining == 0:
                processor.running = processor.cs_target
                processor.cs_target = None
            processor.last_executed = None
            return

        pid = processor.running
        processor.timeline.record(pid, state.time)
        if pid is None:
            processor.last_executed = None
            return

        if state.first_start[pid] is None:
            state.first_start[pid] = state.time
        state.remaining[pid] -= 1
        processor.last_executed = pid

        if state.remaining[pid] == 0:
            state.completion[pid] = state.time + 1
            self.completed_count += 1
            processor.running = None
            logger.debug(f"t={state.time}: {pid} completed on core {processor.core_id}")

    def _check_finished(self) -> bool:
        if self.completed_count >= len(self.meta):
            self.status = EngineStatus.COMPLETED
            return True
        if self.ticks >= self.max_ticks:
            self.status = EngineStatus.TRUNCATED
            logger.warning(
                f"{self.algorithm.value} on {len(self.processors)} cores: tick budget of "
                f"{self.max_ticks} exhausted; result is truncated"
            )
            return True
        return False

    def is_complete(self) -> bool:
        return self.status in (EngineStatus.COMPLETED, EngineStatus.TRUNCATED)

    def run(self) -> MultiCoreResult:
        while self.step():
            pass
        result = self.get_result()
        logger.info(
            f"{self.algorithm.value} on {len(self.processors)} cores finished: "
            f"makespan={result.summary.makespan}"
        )
        return result

    def get_result(self) -> MultiCoreResult:
        timelines = [p.timeline for p in self.processors]
        makespan = max((t.end for t in timelines), default=0)
        busy = sum(t.busy_time() for t in timelines)

        per_process = MetricsCalculator.process_metrics(
            self.meta, self.state.first_start, self.state.completion, makespan
        )
        summary = MetricsCalculator.summarise(
            per_process, makespan, busy, resources=len(self.processors)
        )
        return MultiCoreResult(
            algorithm=self.algorithm.value if self.algorithm else "",
            timeline=timelines[0] if timelines else Timeline(),
            process_metrics=per_process,
            summary=summary,
            truncated=self.status is EngineStatus.TRUNCATED,
            ticks=self.ticks,
            timelines=timelines,
            cores=len(self.processors)
        )


def simulate_multicore(processes: List[Process],
                       algorithm: Union[str, SchedulingAlgorithm] = None,
                       cores: Optional[float] = None,
                       context_switch: Optional[float] = None,
                       max_ticks: Optional[int] = None,
                       config: SimulationConfig = None,
                       validate: bool = False) -> MultiCoreResult:
    """
    Simulate a workload on several processors.

    Args:
        processes: Workload
        algorithm: Strategy enum member or identifier (defaults to config.default_algorithm)
        cores: Number of processors (defaults to config.num_cores)
        context_switch: Context switch cost (defaults to config.context_switch)
        max_ticks: Tick budget (defaults to config.max_ticks)
        config: Simulation configuration
        validate: Validate the workload first

    Returns:
        MultiCoreResult in caller time
    """
    config = config or DEFAULT_SIMULATION_CONFIG
    algorithm = parse_algorithm(algorithm or config.default_algorithm)
    if cores is None:
        cores = config.num_cores
    if context_switch is None:
        context_switch = config.context_switch

    if validate:
        result = WorkloadValidator.validate_processes(processes, config.max_decimal_places)
        result.merge(ConfigValidator.validate_num_cores(cores))
        result.merge(ConfigValidator.validate_context_switch(context_switch))
        log_validation_result(result, "simulate_multicore")
        result.raise_if_invalid(WorkloadError)

    values = [cores, context_switch]
    values.extend(v for p in processes for v in (p.arrival_time, p.burst_time))
    time_scale = TimeScale.from_values(values, config.max_decimal_places)

    scaled = [
        Process(
            pid=p.pid,
            arrival_time=time_scale.arrival_ticks(p.arrival_time),
            burst_time=time_scale.duration_ticks(p.burst_time)
        )
        for p in processes
    ]

    engine = MultiCoreEngine(config)
    engine.initialize(
        scaled, cores, algorithm,
        context_switch=time_scale.cost_ticks(context_switch),
        max_ticks=max_ticks
    )
    return engine.run().unscaled(time_scale)
