"""
Process Module for CPU Scheduling Simulator

This module defines the work items the engines schedule. A Process is an
immutable description of a job: when it arrives and how much CPU time it
needs. The hierarchical engine additionally groups Threads under a parent
process.

Key OS Concepts Demonstrated:
- Process Control Block (PCB) identity: PID, arrival time, burst time
- Threads as the schedulable unit inside a process
- Workload generation for repeatable experiments

Author: Student
Date: October 2026
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
import random

from config import SimulationConfig, DEFAULT_SIMULATION_CONFIG
from validators import require_non_negative, require_positive


@dataclass(frozen=True)
class Process:
    """
    Represents a schedulable process.

    The engines never mutate a Process; runtime bookkeeping (remaining time,
    first start, completion) lives in the simulation state.

    Attributes:
        pid (str): Unique process identifier, e.g. "P1"
        arrival_time (float): Time when the process becomes eligible to run
        burst_time (float): Total CPU time required to complete the process
    """
    pid: str
    arrival_time: float = 0
    burst_time: float = 1

    def __str__(self) -> str:
        return f"Process[PID={self.pid}, Arrival={self.arrival_time}, Burst={self.burst_time}]"

    def to_dict(self) -> Dict[str, Any]:
        """Convert process to dictionary."""
        return {
            'id': self.pid,
            'arrival': self.arrival_time,
            'burst': self.burst_time
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Process':
        """
        Create a process from a dictionary.

        Accepts both the short keys ('id', 'arrival', 'burst') and the
        attribute names.
        """
        return cls(
            pid=str(data.get('id', data.get('pid'))),
            arrival_time=data.get('arrival', data.get('arrival_time', 0)),
            burst_time=data.get('burst', data.get('burst_time', 1))
        )


@dataclass(frozen=True)
class Thread:
    """A thread of a process: the unit the hierarchical engine executes."""
    tid: str
    arrival_time: float = 0
    burst_time: float = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tid': self.tid,
            'arrival': self.arrival_time,
            'burst': self.burst_time
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Thread':
        return cls(
            tid=str(data.get('tid', data.get('id'))),
            arrival_time=data.get('arrival', data.get('arrival_time', 0)),
            burst_time=data.get('burst', data.get('burst_time', 1))
        )


@dataclass(frozen=True)
class ProcessThreads:
    """
    A process described by its threads.

    The process itself is only a scheduling group: it becomes eligible when
    its first thread arrives and needs the total CPU time of its threads.

    Attributes:
        pid: Process identifier
        threads: Threads owned by the process
    """
    pid: str
    threads: List[Thread] = field(default_factory=list)

    @property
    def arrival_time(self) -> float:
        """Effective arrival: earliest thread arrival."""
        return min((t.arrival_time for t in self.threads), default=0)

    @property
    def burst_time(self) -> float:
        """Effective burst: sum of thread bursts."""
        return sum(t.burst_time for t in self.threads)

    def thread_key(self, tid: str) -> str:
        """Globally unique key of one of this process's threads."""
        return f"{self.pid}:{tid}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pid': self.pid,
            'threads': [t.to_dict() for t in self.threads]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProcessThreads':
        return cls(
            pid=str(data.get('pid', data.get('id'))),
            threads=[Thread.from_dict(t) for t in data.get('threads', [])]
        )


def processes_from_dicts(rows: List[Dict[str, Any]]) -> List[Process]:
    """Build processes from plain dictionaries (e.g. parsed JSON)."""
    return [Process.from_dict(row) for row in rows]


def process_threads_from_dicts(rows: List[Dict[str, Any]]) -> List[ProcessThreads]:
    """Build thread groups from plain dictionaries (e.g. parsed JSON)."""
    return [ProcessThreads.from_dict(row) for row in rows]


# =============================================================================
# WORKLOAD GENERATION
# =============================================================================

class ProcessGenerator:
    """
    Factory class for generating processes with random or specified attributes.

    A seeded generator always yields the same workload, which makes strategy
    comparisons and property tests reproducible.
    """

    def __init__(self, config: SimulationConfig = None, seed: Optional[int] = None):
        """
        Initialize the process generator with configuration.

        Args:
            config: SimulationConfig instance (uses default if None)
            seed: Random seed; None draws from system entropy
        """
        self.config = config or DEFAULT_SIMULATION_CONFIG
        self._rng = random.Random(seed)
        self._next_pid = 1

    def reset(self) -> None:
        """Reset the PID counter for a new workload."""
        self._next_pid = 1

    def generate_process(
        self,
        arrival_time: Optional[int] = None,
        burst_time: Optional[int] = None
    ) -> Process:
        """
        Generate a single process with random or specified attributes.

        Args:
            arrival_time: Specific arrival time (random if None)
            burst_time: Specific burst time (random if None)

        Returns:
            New Process instance
        """
        if arrival_time is None:
            arrival_time = self._rng.randint(
                self.config.min_arrival_time,
                self.config.max_arrival_time
            )

        if burst_time is None:
            burst_time = self._rng.randint(
                self.config.min_burst_time,
                self.config.max_burst_time
            )

        process = Process(
            pid=f"P{self._next_pid}",
            arrival_time=arrival_time,
            burst_time=burst_time
        )

        self._next_pid += 1
        return process

    def generate_processes(self, count: Optional[int] = None) -> List[Process]:
        """
        Generate multiple processes.

        Args:
            count: Number of processes to generate (uses config default if None)

        Returns:
            List of Process instances in PID order

        Raises:
            ValidationError: If count is negative
        """
        if count is None:
            count = self.config.num_processes
        require_non_negative(count, "count")

        return [self.generate_process() for _ in range(count)]

    def generate_process_threads(self, count: Optional[int] = None) -> List[ProcessThreads]:
        """
        Generate processes made of 1..max_threads_per_process threads each.

        Args:
            count: Number of processes to generate (uses config default if None)

        Returns:
            List of ProcessThreads
        """
        if count is None:
            count = self.config.num_processes
        require_non_negative(count, "count")
        max_threads = require_positive(self.config.max_threads_per_process,
                                       "max_threads_per_process")

        groups = []
        for _ in range(count):
            pid = f"P{self._next_pid}"
            self._next_pid += 1
            num_threads = self._rng.randint(1, max_threads)
            threads = [
                Thread(
                    tid=f"T{i + 1}",
                    arrival_time=self._rng.randint(
                        self.config.min_arrival_time,
                        self.config.max_arrival_time
                    ),
                    burst_time=self._rng.randint(
                        self.config.min_burst_time,
                        self.config.max_burst_time
                    )
                )
                for i in range(num_threads)
            ]
            groups.append(ProcessThreads(pid=pid, threads=threads))

        return groups

    def generate_predefined_test_set(self) -> List[Process]:
        """
        Generate a predefined set of processes for consistent testing.

        Returns:
            List of processes with known, predictable attributes
        """
        test_processes = [
            (0, 8),   # P1: arrives at 0, needs 8 time units
            (1, 4),   # P2
            (2, 9),   # P3
            (3, 5),   # P4
            (4, 2),   # P5
            (5, 6),   # P6
            (6, 3),   # P7
            (7, 7),   # P8
            (10, 4),  # P9
            (12, 5),  # P10
        ]

        return [
            self.generate_process(arrival_time=arrival, burst_time=burst)
            for arrival, burst in test_processes
        ]
