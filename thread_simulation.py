"""
Hierarchical Scheduling Module for CPU Scheduling Simulator

Two-level scheduling on one CPU: a process-level strategy chooses which
process may run, then a thread-level strategy chooses which of that
process's threads executes. Both levels may use Round Robin with their own
quantum. There is no context switch cost in this model.

Timeline segments and metrics are per thread, keyed "<pid>:<tid>".

OS Concepts:
- Kernel-level process scheduling vs user-level thread scheduling
- Nested time slices (process quantum and thread quantum)
- A process is runnable while any of its threads has work left

Author: Student
Date: October 2026
"""

from typing import List, Dict, Any, Optional, Union
from collections import deque
import logging

from config import SchedulingAlgorithm, SimulationConfig, DEFAULT_SIMULATION_CONFIG
from process import ProcessThreads, Thread
from scheduling_algorithms import (
    EntityMeta,
    ReadyQueue,
    SimulationState,
    RoundRobinScheduler,
    parse_algorithm,
    select_candidate
)
from simulation import EngineStatus, SimulationResult
from time_scale import TimeScale
from timeline import Timeline
from metrics import MetricsCalculator
from validators import (
    WorkloadValidator,
    WorkloadError,
    SimulationError,
    require_non_negative,
    log_validation_result
)

logger = logging.getLogger(__name__)


class ThreadSimulationEngine:
    """
    Process + thread tick engine (integer ticks only).

    Usage:
        engine = ThreadSimulationEngine(config)
        engine.initialize(groups, SchedulingAlgorithm.RR, SchedulingAlgorithm.FCFS,
                          process_quantum=2, thread_quantum=2)
        result = engine.run()
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self.process_algorithm: Optional[SchedulingAlgorithm] = None
        self.thread_algorithm: Optional[SchedulingAlgorithm] = None

        self.process_meta: Dict[str, EntityMeta] = {}
        self.process_remaining: Dict[str, int] = {}
        self.process_queue = ReadyQueue()

        self.thread_meta: Dict[str, EntityMeta] = {}
        self.thread_owner: Dict[str, str] = {}
        self.thread_queues: Dict[str, ReadyQueue] = {}
        self.threads = SimulationState()
        self.pending: deque = deque()

        self.running_pid: Optional[str] = None
        self.running_thread: Optional[str] = None
        self.process_quantum = 2
        self.thread_quantum = 2
        self.process_slice_left = 2
        self.thread_slice_left = 2

        self.timeline = Timeline()
        self.time = 0
        self.max_ticks = self.config.max_ticks
        self.completed_count = 0
        self.ticks = 0
        self.status = EngineStatus.IDLE

    def initialize(self, groups: List[ProcessThreads],
                   process_algorithm: Union[str, SchedulingAlgorithm],
                   thread_algorithm: Union[str, SchedulingAlgorithm],
                   process_quantum: Optional[int] = None,
                   thread_quantum: Optional[int] = None,
                   max_ticks: Optional[int] = None):
        """
        Prepare a fresh run.

        Args:
            groups: Processes with their threads, integer ticks
            process_algorithm: Strategy choosing the process
            thread_algorithm: Strategy choosing the thread within it
            process_quantum: Process-level RR slice (default 2)
            thread_quantum: Thread-level RR slice (default 2)
            max_ticks: Tick budget (defaults to config.max_ticks)
        """
        self.process_algorithm = parse_algorithm(process_algorithm)
        self.thread_algorithm = parse_algorithm(thread_algorithm)
        self.process_quantum = RoundRobinScheduler.slice_length(
            2 if process_quantum is None else process_quantum
        )
        self.thread_quantum = RoundRobinScheduler.slice_length(
            2 if thread_quantum is None else thread_quantum
        )
        self.process_slice_left = self.process_quantum
        self.thread_slice_left = self.thread_quantum

        self.process_meta = {}
        self.thread_meta = {}
        self.thread_owner = {}
        self.thread_queues = {}
        arrivals = []
        for group in groups:
            self.process_meta[group.pid] = EntityMeta(group.arrival_time, group.burst_time)
            self.thread_queues[group.pid] = ReadyQueue()
            for thread in group.threads:
                key = group.thread_key(thread.tid)
                self.thread_meta[key] = EntityMeta(thread.arrival_time, thread.burst_time)
                self.thread_owner[key] = group.pid
                arrivals.append((thread.arrival_time, key))

        self.process_remaining = {pid: m.burst for pid, m in self.process_meta.items()}
        self.process_queue = ReadyQueue()
        self.threads = SimulationState.for_entities(self.thread_meta)
        # Stable: equal arrivals keep input order
        self.pending = deque(sorted(arrivals, key=lambda item: item[0]))

        self.running_pid = None
        self.running_thread = None
        self.timeline = Timeline()
        self.time = 0
        self.max_ticks = require_non_negative(
            self.config.max_ticks if max_ticks is None else max_ticks, "max_ticks"
        )
        self.completed_count = 0
        self.ticks = 0
        self.status = EngineStatus.COMPLETED if not self.thread_meta else EngineStatus.IDLE

        logger.info(
            f"Initialized {self.label} run: {len(self.process_meta)} processes, "
            f"{len(self.thread_meta)} threads, quanta={self.process_quantum}/{self.thread_quantum}"
        )

    @property
    def label(self) -> str:
        return f"{self.process_algorithm.value}/{self.thread_algorithm.value}"

    # =========================================================================
    # RUNNABILITY AND QUEUES
    # =========================================================================

    def _thread_has_work(self, key: Optional[str]) -> bool:
        return key is not None and self.threads.remaining.get(key, 0) > 0

    def _is_runnable(self, pid: str, running_thread: Optional[str]) -> bool:
        """A process is runnable while its running or any queued thread has work."""
        if (running_thread is not None and self.thread_owner.get(running_thread) == pid
                and self._thread_has_work(running_thread)):
            return True
        return any(self._thread_has_work(key) for key in self.thread_queues[pid])

    def _enqueue_process(self, pid: str, running_pid: Optional[str]):
        """Queue a process; no change if it is running or already queued."""
        if pid == running_pid or pid in self.process_queue:
            return
        self.process_queue.push_back(pid)

    def _requeue_running_thread(self, pid: str):
        if self._thread_has_work(self.running_thread):
            self.thread_queues[pid].push_back(self.running_thread)
            self.running_thread = None

    def _reset_slices(self):
        self.process_slice_left = self.process_quantum
        self.thread_slice_left = self.thread_quantum

    # =========================================================================
    # TICK
    # =========================================================================

    def step(self) -> bool:
        """
        Execute one tick.

        Returns:
            True if the simulation should continue, False if done
        """
        if self.process_algorithm is None:
            raise SimulationError("initialize() must be called before step()", "status",
                                  self.status.value)
        if self.is_complete() or self._check_finished():
            return False
        self.status = EngineStatus.RUNNING

        self._handle_arrivals()
        self._cleanup()
        self._expire_process_slice()

        chosen_pid = self._choose_process()
        if chosen_pid is None:
            self.timeline.record(None, self.time)
        else:
            running_in_chosen = self._running_thread_of(chosen_pid)
            chosen_thread = self._choose_thread(chosen_pid, running_in_chosen)
            if chosen_thread is None:
                self.process_queue.remove(chosen_pid)
                self.timeline.record(None, self.time)
            else:
                self._switch_to(chosen_pid, chosen_thread, running_in_chosen)
                self._execute(chosen_pid, chosen_thread)

        self.time += 1
        self.ticks += 1
        return not self._check_finished()

    def _handle_arrivals(self):
        while self.pending and self.pending[0][0] <= self.time:
            _, key = self.pending.popleft()
            pid = self.thread_owner[key]
            self.thread_queues[pid].push_back(key)
            if self._is_runnable(pid, self.running_thread):
                self._enqueue_process(pid, self.running_pid)

    def _cleanup(self):
        """Drop finished threads and unrunnable processes."""
        for queue in self.thread_queues.values():
            queue.purge(lambda key: not self._thread_has_work(key))
        self.process_queue.purge(lambda pid: not self._is_runnable(pid, self.running_thread))

        for pid in self.process_remaining:
            self.process_remaining[pid] = 0
        for key, owner in self.thread_owner.items():
            self.process_remaining[owner] += self.threads.remaining[key]

        if self.running_pid is not None and not self._is_runnable(self.running_pid, self.running_thread):
            self.running_pid = None
            self.running_thread = None
            self._reset_slices()

    def _expire_process_slice(self):
        """Rotate the running process if its RR slice is already used up."""
        if (self.process_algorithm is not SchedulingAlgorithm.RR
                or self.running_pid is None or self.process_slice_left > 0):
            return
        pid = self.running_pid
        self._requeue_running_thread(pid)
        if self._is_runnable(pid, None):
            self._enqueue_process(pid, None)
        self.running_pid = None
        self._reset_slices()

    def _choose_process(self) -> Optional[str]:
        if self.process_algorithm is SchedulingAlgorithm.RR:
            if (self.running_pid is not None and self.process_slice_left > 0
                    and self._is_runnable(self.running_pid, self.running_thread)):
                return self.running_pid
            return self.process_queue.head()
        return select_candidate(
            self.process_algorithm, self.process_queue, self.running_pid,
            self.process_meta, self.process_remaining, self.time
        )

    def _running_thread_of(self, pid: str) -> Optional[str]:
        key = self.running_thread
        if key is not None and self.thread_owner.get(key) == pid and self._thread_has_work(key):
            return key
        return None

    def _choose_thread(self, pid: str, running_in_chosen: Optional[str]) -> Optional[str]:
        queue = self.thread_queues[pid]
        if self.thread_algorithm is SchedulingAlgorithm.RR:
            if running_in_chosen is not None and self.thread_slice_left > 0:
                return running_in_chosen
            head = queue.head()
            return head if head is not None else running_in_chosen
        return select_candidate(
            self.thread_algorithm, queue, running_in_chosen,
            self.thread_meta, self.threads.remaining, self.time
        )

    def _switch_to(self, chosen_pid: str, chosen_thread: str, running_in_chosen: Optional[str]):
        """Preemption bookkeeping at both levels, then reserve the choice."""
        previous_pid = self.running_pid
        if previous_pid is not None and chosen_pid != previous_pid:
            self._requeue_running_thread(previous_pid)
            if self._is_runnable(previous_pid, None):
                self._enqueue_process(previous_pid, chosen_pid)
            logger.debug(f"t={self.time}: process {previous_pid} preempted by {chosen_pid}")
        elif (previous_pid is not None and running_in_chosen is not None
                and chosen_thread != running_in_chosen):
            # Same process, different thread
            self.thread_queues[chosen_pid].push_back(running_in_chosen)
            self.running_thread = None

        if chosen_pid != previous_pid:
            self.process_queue.remove(chosen_pid)
            if self.process_algorithm is SchedulingAlgorithm.RR:
                self.process_slice_left = self.process_quantum
        if chosen_thread != running_in_chosen:
            self.thread_queues[chosen_pid].remove(chosen_thread)
            if self.thread_algorithm is SchedulingAlgorithm.RR:
                self.thread_slice_left = self.thread_quantum

        self.running_pid = chosen_pid
        self.running_thread = chosen_thread

    def _execute(self, pid: str, key: str):
        threads = self.threads
        self.timeline.record(key, self.time)
        if threads.first_start[key] is None:
            threads.first_start[key] = self.time
        threads.remaining[key] -= 1

        if self.thread_algorithm is SchedulingAlgorithm.RR:
            self.thread_slice_left = max(0, self.thread_slice_left - 1)
        if self.process_algorithm is SchedulingAlgorithm.RR:
            self.process_slice_left = max(0, self.process_slice_left - 1)

        if threads.remaining[key] == 0:
            threads.completion[key] = self.time + 1
            self.completed_count += 1
            self.running_thread = None
            self.thread_slice_left = self.thread_quantum
            logger.debug(f"t={self.time}: thread {key} completed")
        elif self.thread_algorithm is SchedulingAlgorithm.RR and self.thread_slice_left == 0:
            self.thread_queues[pid].push_back(key)
            self.running_thread = None
            self.thread_slice_left = self.thread_quantum

        if self.process_algorithm is SchedulingAlgorithm.RR and self.process_slice_left == 0:
            if self._thread_has_work(self.running_thread):
                self.thread_queues[pid].push_back(self.running_thread)
                self.running_thread = None
                self.thread_slice_left = self.thread_quantum
            if self._is_runnable(pid, self.running_thread):
                self._enqueue_process(pid, None)
            self.running_pid = None
            self.process_slice_left = self.process_quantum

    def _check_finished(self) -> bool:
        if self.completed_count >= len(self.thread_meta):
            self.status = EngineStatus.COMPLETED
            return True
        if self.ticks >= self.max_ticks:
            self.status = EngineStatus.TRUNCATED
            logger.warning(
                f"{self.label}: tick budget of {self.max_ticks} exhausted with "
                f"{len(self.thread_meta) - self.completed_count} threads unfinished; "
                f"result is truncated"
            )
            return True
        return False

    def is_complete(self) -> bool:
        return self.status in (EngineStatus.COMPLETED, EngineStatus.TRUNCATED)

    def run(self) -> SimulationResult:
        while self.step():
            pass
        result = self.get_result()
        logger.info(f"{self.label} finished: makespan={result.summary.makespan}")
        return result

    def get_result(self) -> SimulationResult:
        makespan = self.timeline.end
        per_thread = MetricsCalculator.process_metrics(
            self.thread_meta, self.threads.first_start, self.threads.completion, makespan
        )
        summary = MetricsCalculator.summarise(per_thread, makespan, self.timeline.busy_time())
        return SimulationResult(
            algorithm=self.label if self.process_algorithm else "",
            timeline=self.timeline,
            process_metrics=per_thread,
            summary=summary,
            truncated=self.status is EngineStatus.TRUNCATED,
            ticks=self.ticks
        )

    def get_current_state(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'status': self.status.value,
            'running_process': self.running_pid,
            'running_thread': self.running_thread,
            'process_queue': self.process_queue.to_list(),
            'thread_queues': {pid: q.to_list() for pid, q in self.thread_queues.items()},
            'process_slice_left': self.process_slice_left,
            'thread_slice_left': self.thread_slice_left
        }


def simulate_threads(processes: List[ProcessThreads],
                     process_algorithm: Union[str, SchedulingAlgorithm],
                     thread_algorithm: Union[str, SchedulingAlgorithm],
                     process_quantum: Optional[float] = None,
                     thread_quantum: Optional[float] = None,
                     max_ticks: Optional[int] = None,
                     config: SimulationConfig = None,
                     validate: bool = False) -> SimulationResult:
    """
    Simulate two-level process/thread scheduling on one CPU.

    Args:
        processes: Processes with their threads
        process_algorithm: Process-level strategy
        thread_algorithm: Thread-level strategy
        process_quantum: Process-level RR quantum (defaults to config.process_quantum)
        thread_quantum: Thread-level RR quantum (defaults to config.thread_quantum)
        max_ticks: Tick budget (defaults to config.max_ticks)
        config: Simulation configuration
        validate: Validate the workload first

    Returns:
        SimulationResult keyed by "<pid>:<tid>", in caller time
    """
    config = config or DEFAULT_SIMULATION_CONFIG
    process_algorithm = parse_algorithm(process_algorithm)
    thread_algorithm = parse_algorithm(thread_algorithm)
    if process_quantum is None:
        process_quantum = config.process_quantum
    if thread_quantum is None:
        thread_quantum = config.thread_quantum

    if validate:
        result = WorkloadValidator.validate_process_threads(processes, config.max_decimal_places)
        result.merge(WorkloadValidator.validate_strategy(process_algorithm, process_quantum))
        result.merge(WorkloadValidator.validate_strategy(thread_algorithm, thread_quantum))
        log_validation_result(result, "simulate_threads")
        result.raise_if_invalid(WorkloadError)

    values = [v for group in processes for t in group.threads for v in (t.arrival_time, t.burst_time)]
    if process_algorithm.requires_quantum:
        values.append(process_quantum)
    if thread_algorithm.requires_quantum:
        values.append(thread_quantum)
    time_scale = TimeScale.from_values(values, config.max_decimal_places)

    scaled = [
        ProcessThreads(
            pid=group.pid,
            threads=[
                Thread(
                    tid=t.tid,
                    arrival_time=time_scale.arrival_ticks(t.arrival_time),
                    burst_time=time_scale.duration_ticks(t.burst_time)
                )
                for t in group.threads
            ]
        )
        for group in processes
    ]

    engine = ThreadSimulationEngine(config)
    engine.initialize(
        scaled, process_algorithm, thread_algorithm,
        process_quantum=time_scale.duration_ticks(process_quantum),
        thread_quantum=time_scale.duration_ticks(thread_quantum),
        max_ticks=max_ticks
    )
    return engine.run().unscaled(time_scale)
