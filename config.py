"""
Configuration Module for CPU Scheduling Simulator

This module contains all configuration constants and parameters used throughout
the simulation. Centralizing configuration makes it easy to adjust engine
behavior without modifying core logic.

In Operating Systems, configuration management is crucial for:
- Tuning scheduler parameters (time quantum, context switch cost)
- Adapting to different hardware configurations (number of cores)
- Testing various scenarios without code changes

Author: Student
Date: October 2026
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any


# =============================================================================
# ENUMERATIONS - Define categorical constants
# =============================================================================

class SchedulingAlgorithm(Enum):
    """
    The closed set of scheduling strategies understood by every engine.

    Non-preemptive:
    - FCFS: First Come First Served
    - LCFS: Last Come First Served
    - SJF: Shortest Job First
    - LPT: Longest Processing Time first
    - HRRN: Highest Response Ratio Next

    Preemptive:
    - SRT: Shortest Remaining Time
    - RPT: Remaining Processing Time (longest remaining first)
    - RR: Round Robin with a fixed time quantum
    """
    FCFS = "FCFS"
    LCFS = "LCFS"
    RR = "RR"
    SJF = "SJF"
    SRT = "SRT"
    HRRN = "HRRN"
    LPT = "LPT"
    RPT = "RPT"

    @property
    def is_preemptive(self) -> bool:
        """Whether the strategy may interrupt a running entity."""
        return self in (SchedulingAlgorithm.SRT,
                        SchedulingAlgorithm.RPT,
                        SchedulingAlgorithm.RR)

    @property
    def requires_quantum(self) -> bool:
        """Whether the strategy needs a time quantum."""
        return self is SchedulingAlgorithm.RR


# =============================================================================
# SIMULATION CONFIGURATION
# =============================================================================

# Safety bound on simulated ticks; reaching it means a truncated result
DEFAULT_MAX_TICKS = 200000

# Inputs are scaled to integer ticks with at most this many decimal places
DEFAULT_MAX_DECIMAL_PLACES = 2

# Timeline tags for non-productive context switch ticks
CONTEXT_SWITCH_PROCESS = "CS-P"
CONTEXT_SWITCH_THREAD = "CS-T"
CONTEXT_SWITCH_TAGS = frozenset((CONTEXT_SWITCH_PROCESS, CONTEXT_SWITCH_THREAD))

# Strategies the multi-core engine assigns slot by slot
SLOT_GREEDY_ALGORITHMS = frozenset((SchedulingAlgorithm.LPT, SchedulingAlgorithm.RPT))


@dataclass
class SimulationConfig:
    """
    Main configuration class for the simulation.

    Attributes:
        time_quantum: Time slice for Round Robin on the single/multi-core engines
        context_switch: Cost of switching between two entities (0 disables it)
        num_cores: Number of execution slots for the multi-core engine
        process_quantum: Process-level Round Robin slice (hierarchical engine)
        thread_quantum: Thread-level Round Robin slice (hierarchical engine)
        max_ticks: Safety tick budget for every engine
        max_decimal_places: Precision cap for fractional inputs
    """
    # Scheduler Configuration
    time_quantum: float = 2
    context_switch: float = 0
    num_cores: int = 1
    min_cores: int = 1
    max_cores: int = 64

    # Hierarchical Scheduling Configuration
    process_quantum: float = 2
    thread_quantum: float = 2

    # Engine Limits
    max_ticks: int = DEFAULT_MAX_TICKS
    max_decimal_places: int = DEFAULT_MAX_DECIMAL_PLACES

    # Workload Generation Parameters
    num_processes: int = 8
    min_burst_time: int = 1
    max_burst_time: int = 10
    min_arrival_time: int = 0
    max_arrival_time: int = 10
    max_threads_per_process: int = 3

    default_algorithm: SchedulingAlgorithm = SchedulingAlgorithm.FCFS

    def validate(self) -> bool:
        """
        Validate configuration parameters.

        Returns:
            bool: True if configuration is valid

        Raises:
            ValueError: If any parameter is invalid
        """
        if not (self.min_cores <= self.num_cores <= self.max_cores):
            raise ValueError(f"num_cores must be between {self.min_cores} and {self.max_cores}")

        if self.time_quantum <= 0:
            raise ValueError("time_quantum must be positive")

        if self.process_quantum <= 0 or self.thread_quantum <= 0:
            raise ValueError("process_quantum and thread_quantum must be positive")

        if self.context_switch < 0:
            raise ValueError("context_switch cannot be negative")

        if self.max_ticks < 1:
            raise ValueError("max_ticks must be at least 1")

        if self.max_decimal_places < 0:
            raise ValueError("max_decimal_places cannot be negative")

        if self.num_processes < 1:
            raise ValueError("num_processes must be at least 1")

        if self.min_burst_time < 1 or self.min_burst_time > self.max_burst_time:
            raise ValueError("burst time range must satisfy 1 <= min_burst_time <= max_burst_time")

        if self.min_arrival_time < 0 or self.min_arrival_time > self.max_arrival_time:
            raise ValueError("arrival time range must satisfy 0 <= min_arrival_time <= max_arrival_time")

        if self.max_threads_per_process < 1:
            raise ValueError("max_threads_per_process must be at least 1")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary for serialization.

        Returns:
            Dict containing all configuration parameters
        """
        return {
            'time_quantum': self.time_quantum,
            'context_switch': self.context_switch,
            'num_cores': self.num_cores,
            'process_quantum': self.process_quantum,
            'thread_quantum': self.thread_quantum,
            'max_ticks': self.max_ticks,
            'max_decimal_places': self.max_decimal_places,
            'num_processes': self.num_processes,
            'min_burst_time': self.min_burst_time,
            'max_burst_time': self.max_burst_time,
            'min_arrival_time': self.min_arrival_time,
            'max_arrival_time': self.max_arrival_time,
            'max_threads_per_process': self.max_threads_per_process,
            'default_algorithm': self.default_algorithm.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """
        Create configuration from dictionary.

        Unknown keys are ignored.

        Args:
            data: Dictionary containing configuration parameters

        Returns:
            SimulationConfig instance
        """
        config = cls()
        for key, value in data.items():
            if key == 'default_algorithm':
                value = SchedulingAlgorithm(value)
            if hasattr(config, key):
                setattr(config, key, value)
        return config


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

@dataclass
class LoggingConfig:
    """
    Configuration for the logging system.

    Logging is essential for:
    - Debugging scheduling decisions tick by tick
    - Spotting truncated runs (tick budget exhausted)
    """
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "simulation.log"

    # Log format
    log_format: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Detail level
    verbose: bool = False  # If True, logs per-tick decisions (DEBUG)


# =============================================================================
# DEFAULT INSTANCES
# =============================================================================

DEFAULT_SIMULATION_CONFIG = SimulationConfig()
DEFAULT_LOGGING_CONFIG = LoggingConfig()


# =============================================================================
# CONSTANTS
# =============================================================================

# Version information
VERSION = "1.0.0"
APP_NAME = "CPU Scheduling Simulator"

# Help text for algorithms
ALGORITHM_DESCRIPTIONS = {
    SchedulingAlgorithm.FCFS: """
First Come First Served:
- Processes run strictly in order of arrival
- Once started, a process runs to completion (non-preemptive)
    """.strip(),

    SchedulingAlgorithm.LCFS: """
Last Come First Served:
- The process that entered the ready queue most recently is picked first
- Once started, a process runs to completion (non-preemptive)
    """.strip(),

    SchedulingAlgorithm.SJF: """
Shortest Job First:
- Each time the CPU frees up, the process with the shortest burst is picked
- Once started, a process runs to completion (non-preemptive)
    """.strip(),

    SchedulingAlgorithm.LPT: """
Longest Processing Time:
- Each time the CPU frees up, the process with the longest burst is picked
- Once started, a process runs to completion (non-preemptive)
    """.strip(),

    SchedulingAlgorithm.HRRN: """
Highest Response Ratio Next:
- Picks the process with the largest (waiting time + burst) / burst
- Balances short jobs against jobs that have waited long (non-preemptive)
    """.strip(),

    SchedulingAlgorithm.SRT: """
Shortest Remaining Time:
- The process with the least remaining time always runs
- A newly arrived shorter process interrupts the current one (preemptive)
    """.strip(),

    SchedulingAlgorithm.RPT: """
Remaining Processing Time:
- The process with the most remaining time always runs
- The choice can change as new processes arrive (preemptive)
    """.strip(),

    SchedulingAlgorithm.RR: """
Round Robin:
- Each process runs for at most one time quantum
- An unfinished process goes to the back of the ready queue (preemptive)
    """.strip(),
}
