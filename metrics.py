"""
Metrics Module for CPU Scheduling Simulator

Derives the classic scheduling metrics from what an engine recorded:

- Turnaround Time = Completion Time - Arrival Time
- Waiting Time    = Turnaround Time - Burst Time
- Response Time   = First Start Time - Arrival Time

and the run summary: makespan, CPU utilization, throughput and the average
of each per-process metric.

Author: Student
Date: October 2026
"""

from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional, Mapping, Tuple

from utils import calculate_mean
from validators import safe_divide


@dataclass
class ProcessMetrics:
    """Per-entity timing metrics."""
    start_time: float
    completion_time: float
    turnaround_time: float
    waiting_time: float
    response_time: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SimulationSummary:
    """
    Aggregate metrics of one simulation run.

    cpu_utilization is busy time over (makespan x number of resources);
    idle and context switch time do not count as busy.
    """
    makespan: float = 0
    cpu_utilization: float = 0.0
    throughput: float = 0.0
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_response_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class MetricsCalculator:
    """Builds ProcessMetrics and SimulationSummary records."""

    @staticmethod
    def process_metrics(
        meta: Mapping[str, Tuple[float, float]],
        first_start: Mapping[str, Optional[int]],
        completion: Mapping[str, Optional[int]],
        makespan: float
    ) -> Dict[str, ProcessMetrics]:
        """
        Compute metrics for every entity.

        An entity that never ran is reported as starting at its arrival and
        one that never finished (truncated run) as completing at the makespan.

        Args:
            meta: entity id -> (arrival, burst)
            first_start: entity id -> first tick executed
            completion: entity id -> completion tick
            makespan: end of the run

        Returns:
            Dictionary of entity id to ProcessMetrics, in meta order
        """
        results = {}
        for pid, (arrival, burst) in meta.items():
            start = first_start.get(pid)
            if start is None:
                start = arrival
            finish = completion.get(pid)
            if finish is None:
                finish = makespan
            turnaround = finish - arrival
            results[pid] = ProcessMetrics(
                start_time=start,
                completion_time=finish,
                turnaround_time=turnaround,
                waiting_time=turnaround - burst,
                response_time=start - arrival
            )
        return results

    @staticmethod
    def summarise(
        per_process: Mapping[str, ProcessMetrics],
        makespan: float,
        busy_time: float,
        resources: int = 1
    ) -> SimulationSummary:
        """
        Aggregate per-entity metrics into a run summary.

        Args:
            per_process: Output of process_metrics()
            makespan: End of the run
            busy_time: Ticks spent executing, summed over all resources
            resources: Number of cores the run had

        Returns:
            SimulationSummary
        """
        metrics = list(per_process.values())
        return SimulationSummary(
            makespan=makespan,
            cpu_utilization=safe_divide(busy_time, makespan * max(1, resources)),
            throughput=safe_divide(len(metrics), makespan),
            avg_waiting_time=calculate_mean([m.waiting_time for m in metrics]),
            avg_turnaround_time=calculate_mean([m.turnaround_time for m in metrics]),
            avg_response_time=calculate_mean([m.response_time for m in metrics])
        )

    @staticmethod
    def unscale_process_metrics(per_process: Mapping[str, ProcessMetrics],
                                time_scale) -> Dict[str, ProcessMetrics]:
        """Convert tick-domain metrics back to caller time."""
        return {
            pid: ProcessMetrics(
                start_time=time_scale.to_time(m.start_time),
                completion_time=time_scale.to_time(m.completion_time),
                turnaround_time=time_scale.to_time(m.turnaround_time),
                waiting_time=time_scale.to_time(m.waiting_time),
                response_time=time_scale.to_time(m.response_time)
            )
            for pid, m in per_process.items()
        }

    @staticmethod
    def unscale_summary(summary: SimulationSummary, time_scale, count: int) -> SimulationSummary:
        """
        Convert a tick-domain summary back to caller time.

        Utilization is a ratio and stays as is; throughput is recomputed
        against the unscaled makespan.
        """
        makespan = time_scale.to_time(summary.makespan)
        return SimulationSummary(
            makespan=makespan,
            cpu_utilization=summary.cpu_utilization,
            throughput=safe_divide(count, makespan),
            avg_waiting_time=time_scale.to_time(summary.avg_waiting_time),
            avg_turnaround_time=time_scale.to_time(summary.avg_turnaround_time),
            avg_response_time=time_scale.to_time(summary.avg_response_time)
        )


# =============================================================================
# COMPARISON
# =============================================================================

# Metrics where a larger value is better; every other metric is minimized
HIGHER_IS_BETTER = frozenset(('cpu_utilization', 'throughput'))


class MetricsComparator:
    """
    Compare run summaries of several strategies on the same workload.

    Usage:
        comparator = MetricsComparator()
        comparator.add_result("FCFS", fcfs_summary)
        comparator.add_result("SJF", sjf_summary)
        comparator.get_best_algorithm('avg_waiting_time')  # -> "SJF"
    """

    def __init__(self):
        self.results: Dict[str, SimulationSummary] = {}

    def add_result(self, name: str, summary: SimulationSummary) -> None:
        self.results[name] = summary

    def clear(self) -> None:
        self.results.clear()

    def ranking(self, metric: str = 'avg_waiting_time') -> List[Tuple[str, float]]:
        """
        Rank strategies on one metric, best first.

        Ties keep insertion order.

        Raises:
            ValueError: If the metric is not a SimulationSummary field
        """
        if metric not in SimulationSummary.__dataclass_fields__:
            raise ValueError(f"Unknown metric: {metric}")
        values = [(name, getattr(summary, metric)) for name, summary in self.results.items()]
        reverse = metric in HIGHER_IS_BETTER
        return sorted(values, key=lambda item: item[1], reverse=reverse)

    def get_best_algorithm(self, metric: str = 'avg_waiting_time') -> Optional[str]:
        ranked = self.ranking(metric)
        if not ranked:
            return None
        return ranked[0][0]

    def generate_report(self) -> str:
        """Plain text table of every stored summary."""
        header = f"{'Algorithm':<10} {'Makespan':>9} {'AvgWait':>9} {'AvgTurn':>9} {'AvgResp':>9} {'Util%':>7} {'Thru':>7}"
        lines = [header, "-" * len(header)]
        for name, s in self.results.items():
            lines.append(
                f"{name:<10} {s.makespan:>9.2f} {s.avg_waiting_time:>9.2f} "
                f"{s.avg_turnaround_time:>9.2f} {s.avg_response_time:>9.2f} "
                f"{s.cpu_utilization * 100:>7.1f} {s.throughput:>7.3f}"
            )
        return "\n".join(lines)
