"""
Simulation Engine Module for CPU Scheduling Simulator

This module provides the single-core engine: a discrete-time loop that
drives one scheduling strategy over a workload and records what the CPU
did at every tick.

The simulation follows a discrete time model:
1. Time starts at tick 0
2. At each tick:
   - Arrival: processes whose arrival time has come join the ready queue
   - Context switch: a pending switch consumes the tick
   - Decision: the strategy picks the process for this tick
   - Execution: the chosen process runs for one tick
3. Continue until all processes complete or the tick budget runs out

Fractional inputs are handled by simulate(), which scales everything to
integer ticks before the engine runs and scales the results back.

OS Concepts:
- Discrete time simulation of a CPU
- Ready queue management and preemption
- Context switching overhead

Author: Student
Date: October 2026
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Union
from collections import deque
from enum import Enum
import logging

from config import (
    SchedulingAlgorithm,
    SimulationConfig,
    DEFAULT_SIMULATION_CONFIG,
    CONTEXT_SWITCH_PROCESS
)
from process import Process, ProcessGenerator
from scheduling_algorithms import (
    CPUScheduler,
    EntityMeta,
    SchedulerFactory,
    SchedulingContext,
    SimulationState,
    parse_algorithm
)
from time_scale import TimeScale
from timeline import Timeline
from metrics import MetricsCalculator, MetricsComparator, ProcessMetrics, SimulationSummary
from validators import (
    ConfigValidator,
    WorkloadValidator,
    WorkloadError,
    SimulationError,
    require_non_negative,
    log_validation_result
)

logger = logging.getLogger(__name__)


class EngineStatus(Enum):
    """
    States of a simulation engine.

    State Transitions:
    IDLE -> RUNNING (first step)
    RUNNING -> COMPLETED (every entity finished)
    RUNNING -> TRUNCATED (tick budget exhausted)
    """
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    TRUNCATED = "truncated"


@dataclass
class SimulationResult:
    """
    Complete results of a simulation run.

    Attributes:
        algorithm: Strategy label, e.g. "SRT" or "RR/FCFS" for hierarchical runs
        timeline: Gantt chart of the CPU
        process_metrics: Entity id -> ProcessMetrics, in input order
        summary: Aggregate metrics
        truncated: True when the tick budget ran out before completion
        ticks: Number of simulated ticks (integer domain)
    """
    algorithm: str
    timeline: Timeline
    process_metrics: Dict[str, ProcessMetrics]
    summary: SimulationSummary
    truncated: bool = False
    ticks: int = 0

    def unscaled(self, time_scale: TimeScale) -> 'SimulationResult':
        """Convert a tick-domain result back to caller time."""
        if time_scale.is_identity:
            return self
        return SimulationResult(
            algorithm=self.algorithm,
            timeline=self.timeline.scaled(time_scale),
            process_metrics=MetricsCalculator.unscale_process_metrics(
                self.process_metrics, time_scale
            ),
            summary=MetricsCalculator.unscale_summary(
                self.summary, time_scale, len(self.process_metrics)
            ),
            truncated=self.truncated,
            ticks=self.ticks
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export."""
        return {
            'algorithm': self.algorithm,
            'truncated': self.truncated,
            'timeline': self.timeline.to_list(),
            'process_metrics': {pid: m.to_dict() for pid, m in self.process_metrics.items()},
            'summary': self.summary.to_dict()
        }


class SimulationEngine:
    """
    Single-core tick engine.

    Works on integer ticks only; use simulate() for arbitrary inputs.

    Usage:
        engine = SimulationEngine(config)
        engine.initialize(processes, SchedulingAlgorithm.SRT)
        result = engine.run()
        # or for step-by-step:
        engine.initialize(processes, SchedulingAlgorithm.RR, quantum=2)
        while engine.step():
            print(engine.state.time, engine.state.running)
        result = engine.get_result()
    """

    def __init__(self, config: SimulationConfig = None):
        """
        Initialize the simulation engine.

        Args:
            config: Simulation configuration (tick budget)
        """
        self.config = config or DEFAULT_SIMULATION_CONFIG

        self.scheduler: Optional[CPUScheduler] = None
        self.algorithm: Optional[SchedulingAlgorithm] = None
        self.meta: Dict[str, EntityMeta] = {}
        self.pending: deque = deque()
        self.state = SimulationState()
        self.ctx: Optional[SchedulingContext] = None
        self.timeline = Timeline()

        self.context_switch = 0
        self.max_ticks = self.config.max_ticks
        self.completed_count = 0
        self.last_executed: Optional[str] = None
        self.ticks = 0
        self.status = EngineStatus.IDLE

    def initialize(self, processes: List[Process],
                   algorithm: Union[str, SchedulingAlgorithm],
                   quantum: Optional[int] = None,
                   context_switch: int = 0,
                   max_ticks: Optional[int] = None):
        """
        Prepare a fresh run.

        Args:
            processes: Workload with integer arrival and burst ticks
            algorithm: Scheduling strategy
            quantum: Round Robin slice in ticks
            context_switch: Context switch cost in ticks
            max_ticks: Tick budget (defaults to config.max_ticks)
        """
        self.algorithm = parse_algorithm(algorithm)
        self.scheduler = SchedulerFactory.create_scheduler(self.algorithm)
        self.meta = {p.pid: EntityMeta(p.arrival_time, p.burst_time) for p in processes}

        # Stable sort: equal arrivals keep input order
        self.pending = deque(sorted(processes, key=lambda p: p.arrival_time))

        self.state = SimulationState.for_entities(self.meta)
        self.ctx = SchedulingContext(state=self.state, meta=self.meta, quantum=quantum)
        self.timeline = Timeline()

        self.context_switch = max(0, int(context_switch or 0))
        self.max_ticks = require_non_negative(
            self.config.max_ticks if max_ticks is None else max_ticks, "max_ticks"
        )
        self.completed_count = 0
        self.last_executed = None
        self.ticks = 0
        self.status = EngineStatus.COMPLETED if not self.meta else EngineStatus.IDLE

        self.scheduler.init(self.ctx)
        logger.info(
            f"Initialized {self.algorithm.value} run: {len(self.meta)} processes, "
            f"quantum={quantum}, context_switch={self.context_switch}"
        )

    def step(self) -> bool:
        """
        Execute one tick.

        Returns:
            True if the simulation should continue, False if done
        """
        if self.scheduler is None:
            raise SimulationError("initialize() must be called before step()", "status",
                                  self.status.value)
        if self.is_complete() or self._check_finished():
            return False
        self.status = EngineStatus.RUNNING

        state = self.state
        self._handle_arrivals()

        if state.cs_remaining > 0:
            self._context_switch_tick()
        else:
            chosen = self.scheduler.decide(self.ctx)
            self._apply_decision(chosen)

            if (self.context_switch > 0 and self.last_executed is not None
                    and chosen is not None and chosen != self.last_executed):
                state.running = None
                state.cs_target = chosen
                state.cs_remaining = self.context_switch
                self._context_switch_tick()
            else:
                self._execute(chosen)

        state.time += 1
        self.ticks += 1
        return not self._check_finished()

    def _handle_arrivals(self):
        """Move processes whose arrival tick has come into the ready queue."""
        state = self.state
        while self.pending and self.pending[0].arrival_time <= state.time:
            process = self.pending.popleft()
            state.ready.push_back(process.pid)
            self.scheduler.on_arrive(self.ctx, process.pid)

    def _apply_decision(self, chosen: Optional[str]):
        """Requeue a displaced process and reserve the chosen one."""
        state = self.state
        running = state.running
        if chosen != running and running is not None and state.remaining[running] > 0:
            state.ready.push_back(running)
            logger.debug(f"t={state.time}: {running} preempted by {chosen}")
        if chosen is not None and chosen != running:
            state.ready.remove(chosen)

    def _context_switch_tick(self):
        state = self.state
        self.timeline.record(CONTEXT_SWITCH_PROCESS, state.time)
        state.cs_remaining -= 1
        if state.cs_remaining == 0:
            state.running = state.cs_target
            state.cs_target = None

        self.scheduler.on_tick_end(self.ctx, None)
        self.last_executed = None

    def _execute(self, chosen: Optional[str]):
        state = self.state
        state.running = chosen
        self.timeline.record(chosen, state.time)

        if chosen is not None:
            if state.first_start[chosen] is None:
                state.first_start[chosen] = state.time
            state.remaining[chosen] -= 1

            if state.remaining[chosen] == 0:
                state.completion[chosen] = state.time + 1
                self.completed_count += 1
                state.running = None
                logger.debug(f"t={state.time}: {chosen} completed")

        self.scheduler.on_tick_end(self.ctx, chosen)
        self.last_executed = chosen

    def _check_finished(self) -> bool:
        if self.completed_count >= len(self.meta):
            self.status = EngineStatus.COMPLETED
            return True
        if self.ticks >= self.max_ticks:
            self.status = EngineStatus.TRUNCATED
            logger.warning(
                f"{self.algorithm.value}: tick budget of {self.max_ticks} exhausted with "
                f"{len(self.meta) - self.completed_count} processes unfinished; result is truncated"
            )
            return True
        return False

    def is_complete(self) -> bool:
        """Check if simulation is complete."""
        return self.status in (EngineStatus.COMPLETED, EngineStatus.TRUNCATED)

    def run(self) -> SimulationResult:
        """
        Run the simulation to the end.

        Returns:
            SimulationResult in the integer tick domain
        """
        while self.step():
            pass
        result = self.get_result()
        logger.info(
            f"{self.algorithm.value} finished: makespan={result.summary.makespan}, "
            f"avg_waiting={result.summary.avg_waiting_time:.2f}"
        )
        return result

    def get_result(self) -> SimulationResult:
        """
        Derive metrics from what has been simulated so far.

        Returns:
            SimulationResult with all data
        """
        makespan = self.timeline.end
        per_process = MetricsCalculator.process_metrics(
            self.meta, self.state.first_start, self.state.completion, makespan
        )
        summary = MetricsCalculator.summarise(
            per_process, makespan, self.timeline.busy_time(), resources=1
        )
        return SimulationResult(
            algorithm=self.algorithm.value if self.algorithm else "",
            timeline=self.timeline,
            process_metrics=per_process,
            summary=summary,
            truncated=self.status is EngineStatus.TRUNCATED,
            ticks=self.ticks
        )

    def get_current_state(self) -> Dict[str, Any]:
        """Current engine state for display or debugging."""
        return {
            'time': self.state.time,
            'status': self.status.value,
            'running': self.state.running,
            'ready': self.state.ready.to_list(),
            'completed': self.completed_count,
            'total_processes': len(self.meta),
            'context_switch_remaining': self.state.cs_remaining
        }


def _check_workload(processes: List[Process], algorithm: SchedulingAlgorithm,
                    quantum: Optional[float], context_switch: float,
                    config: SimulationConfig):
    result = WorkloadValidator.validate_processes(processes, config.max_decimal_places)
    result.merge(WorkloadValidator.validate_strategy(algorithm, quantum))
    result.merge(ConfigValidator.validate_context_switch(context_switch))
    log_validation_result(result, "simulate")
    result.raise_if_invalid(WorkloadError)


def simulate(processes: List[Process],
             algorithm: Union[str, SchedulingAlgorithm] = None,
             quantum: Optional[float] = None,
             context_switch: Optional[float] = None,
             max_ticks: Optional[int] = None,
             config: SimulationConfig = None,
             validate: bool = False) -> SimulationResult:
    """
    Simulate a workload on a single CPU.

    Inputs with decimals are scaled to integer ticks (at most
    config.max_decimal_places digits) and the result is scaled back.

    Args:
        processes: Workload
        algorithm: Strategy enum member or identifier (defaults to config.default_algorithm)
        quantum: Round Robin quantum (defaults to config.time_quantum for RR)
        context_switch: Context switch cost (defaults to config.context_switch)
        max_ticks: Tick budget (defaults to config.max_ticks)
        config: Simulation configuration
        validate: Validate the workload first

    Returns:
        SimulationResult in caller time

    Raises:
        ConfigurationError: Unknown strategy
        WorkloadError: Invalid workload when validate is True
    """
    config = config or DEFAULT_SIMULATION_CONFIG
    algorithm = parse_algorithm(algorithm or config.default_algorithm)
    if quantum is None and algorithm.requires_quantum:
        quantum = config.time_quantum
    if context_switch is None:
        context_switch = config.context_switch

    if validate:
        _check_workload(processes, algorithm, quantum, context_switch, config)

    values = [v for p in processes for v in (p.arrival_time, p.burst_time)]
    if quantum is not None:
        values.append(quantum)
    values.append(context_switch)
    time_scale = TimeScale.from_values(values, config.max_decimal_places)

    scaled = [
        Process(
            pid=p.pid,
            arrival_time=time_scale.arrival_ticks(p.arrival_time),
            burst_time=time_scale.duration_ticks(p.burst_time)
        )
        for p in processes
    ]

    engine = SimulationEngine(config)
    engine.initialize(
        scaled, algorithm,
        quantum=time_scale.duration_ticks(quantum) if quantum is not None else None,
        context_switch=time_scale.cost_ticks(context_switch),
        max_ticks=max_ticks
    )
    return engine.run().unscaled(time_scale)


class BatchSimulator:
    """
    Run multiple simulations for algorithm comparison.

    This class helps compare scheduling strategies by running the same
    workload with each of them on the single-core engine.
    """

    def __init__(self, config: SimulationConfig = None):
        """
        Initialize batch simulator.

        Args:
            config: Base configuration for simulations
        """
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self.results: Dict[str, SimulationResult] = {}
        self.comparator = MetricsComparator()

    def run_comparison(self, algorithms: List[SchedulingAlgorithm] = None,
                       processes: List[Process] = None,
                       quantum: Optional[float] = None,
                       context_switch: Optional[float] = None,
                       seed: Optional[int] = None) -> Dict[str, SimulationResult]:
        """
        Run simulation with multiple algorithms.

        Args:
            algorithms: List of algorithms to compare (defaults to all)
            processes: Processes to use (generates if None)
            quantum: Round Robin quantum
            context_switch: Context switch cost
            seed: Seed for the generated workload

        Returns:
            Dictionary mapping algorithm names to results
        """
        if algorithms is None:
            algorithms = list(SchedulingAlgorithm)

        # Generate processes once for fair comparison
        if processes is None:
            generator = ProcessGenerator(config=self.config, seed=seed)
            processes = generator.generate_processes(self.config.num_processes)

        self.results.clear()
        self.comparator.clear()

        for algo in algorithms:
            algo = parse_algorithm(algo)
            result = simulate(
                processes, algo,
                quantum=quantum,
                context_switch=context_switch,
                config=self.config
            )
            self.results[algo.value] = result
            self.comparator.add_result(algo.value, result.summary)

        return dict(self.results)

    def get_comparison_report(self) -> str:
        """Generate comparison report."""
        return self.comparator.generate_report()

    def get_best_algorithm(self, metric: str = 'avg_turnaround_time') -> Optional[str]:
        """Get best algorithm for a metric."""
        return self.comparator.get_best_algorithm(metric)
