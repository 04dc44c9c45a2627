#!/usr/bin/env python3
"""
CPU Scheduling Simulator - Main Entry Point

Runs a workload through one of the scheduling engines and prints the
timeline, per-process metrics and the run summary.

Usage:
    python main.py -a SRT                          # random workload, single core
    python main.py -i workload.json -a RR -q 2     # workload from a JSON file
    python main.py -a LPT --cores 2 -c 1           # multi-core with context switch
    python main.py --threads --process-algorithm RR --thread-algorithm FCFS
    python main.py --compare --seed 7              # all strategies side by side
    python main.py -a SJF --json                   # machine-readable output

Author: Student
Date: October 2026
"""

import sys
import os
import argparse
import json
import logging
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import (
    SimulationConfig,
    LoggingConfig,
    SchedulingAlgorithm,
    ALGORITHM_DESCRIPTIONS,
    VERSION,
    APP_NAME,
    DEFAULT_MAX_TICKS
)
from process import Process, ProcessGenerator, ProcessThreads, Thread
from simulation import BatchSimulator, SimulationResult, simulate
from multicore_simulation import MultiCoreResult, simulate_multicore
from thread_simulation import simulate_threads
from metrics import SimulationSummary
from utils import (
    DataExporter,
    calculate_std_dev,
    load_workload,
    setup_logging
)
from validators import (
    ConfigValidator,
    ConfigurationError,
    ValidationError,
    log_validation_result
)

logger = logging.getLogger(__name__)

ALGORITHM_CHOICES = [a.value for a in SchedulingAlgorithm]


def print_banner():
    """Print application banner."""
    print("=" * 70)
    print(f"  {APP_NAME} v{VERSION}")
    print("=" * 70)


def print_algorithms():
    """Print every strategy with its description."""
    for algo in SchedulingAlgorithm:
        kind = "preemptive" if algo.is_preemptive else "non-preemptive"
        print(f"\n{algo.value} ({kind})")
        print(ALGORITHM_DESCRIPTIONS[algo])


# =============================================================================
# WORKLOAD
# =============================================================================

def as_thread_groups(workload) -> List[ProcessThreads]:
    """Turn a flat workload into single-threaded processes."""
    groups = []
    for item in workload:
        if isinstance(item, ProcessThreads):
            groups.append(item)
        else:
            groups.append(ProcessThreads(
                pid=item.pid,
                threads=[Thread(tid="T1", arrival_time=item.arrival_time, burst_time=item.burst_time)]
            ))
    return groups


def build_workload(args, config: SimulationConfig):
    """
    Load the workload from --input or generate one.

    Returns:
        (workload, is_hierarchical)
    """
    if args.input:
        workload = load_workload(args.input)
        logger.info(f"Loaded {len(workload)} processes from {args.input}")
    else:
        generator = ProcessGenerator(config=config, seed=args.seed)
        if args.threads:
            workload = generator.generate_process_threads(config.num_processes)
        else:
            workload = generator.generate_processes(config.num_processes)
        logger.info(f"Generated {len(workload)} processes (seed={args.seed})")

    hierarchical = args.threads or any(isinstance(item, ProcessThreads) for item in workload)
    if hierarchical:
        return as_thread_groups(workload), True
    return workload, False


# =============================================================================
# OUTPUT
# =============================================================================

def format_timeline(timeline) -> str:
    return "  ".join(f"[{s.pid or 'IDLE'} {s.start}-{s.end}]" for s in timeline)


def format_summary(summary: SimulationSummary) -> List[str]:
    return [
        f"  Makespan:             {summary.makespan}",
        f"  CPU Utilization:      {summary.cpu_utilization * 100:.1f}%",
        f"  Throughput:           {summary.throughput:.3f} per time unit",
        f"  Avg Waiting Time:     {summary.avg_waiting_time:.2f}",
        f"  Avg Turnaround Time:  {summary.avg_turnaround_time:.2f}",
        f"  Avg Response Time:    {summary.avg_response_time:.2f}",
    ]


def format_result(result: SimulationResult) -> str:
    """Plain text report of one run."""
    lines = [f"\n[{result.algorithm}]", "-" * 70, "Timeline:"]
    if isinstance(result, MultiCoreResult):
        for core_id, timeline in enumerate(result.timelines):
            lines.append(f"  Core {core_id}: {format_timeline(timeline)}")
    else:
        lines.append(f"  {format_timeline(result.timeline)}")

    lines.append("")
    lines.append(f"  {'ID':<10} {'Start':>7} {'Finish':>7} {'Turn':>7} {'Wait':>7} {'Resp':>7}")
    for pid, m in result.process_metrics.items():
        lines.append(
            f"  {pid:<10} {m.start_time:>7} {m.completion_time:>7} {m.turnaround_time:>7} "
            f"{m.waiting_time:>7} {m.response_time:>7}"
        )

    lines.append("\nSummary:")
    lines.extend(format_summary(result.summary))
    waits = [m.waiting_time for m in result.process_metrics.values()]
    lines.append(f"  Waiting Time Std Dev: {calculate_std_dev(waits):.2f}")
    if result.truncated:
        lines.append("  WARNING: tick budget exhausted, result is truncated")
    return "\n".join(lines)


# =============================================================================
# COMMANDS
# =============================================================================

def run_comparison(workload: List[Process], args, config: SimulationConfig) -> dict:
    """Run every strategy on the same workload."""
    batch = BatchSimulator(config)
    results = batch.run_comparison(
        processes=workload,
        quantum=args.quantum,
        context_switch=args.context_switch
    )
    best = {
        metric: batch.get_best_algorithm(metric)
        for metric in ('avg_waiting_time', 'avg_turnaround_time', 'avg_response_time',
                       'cpu_utilization', 'throughput')
    }

    if args.json:
        print(json.dumps({
            'results': {name: r.to_dict() for name, r in results.items()},
            'best': best
        }, indent=2))
    else:
        print("\n[Algorithm Comparison]")
        print(batch.get_comparison_report())
        print()
        for metric, name in best.items():
            print(f"  Best for {metric}: {name}")

    return {name: r.to_dict() for name, r in results.items()}


def run_single(workload, hierarchical: bool, args, config: SimulationConfig) -> SimulationResult:
    """Run the engine that matches the options."""
    if hierarchical:
        return simulate_threads(
            workload,
            args.process_algorithm,
            args.thread_algorithm,
            process_quantum=config.process_quantum,
            thread_quantum=config.thread_quantum,
            config=config,
            validate=True
        )
    if config.num_cores > 1:
        return simulate_multicore(
            workload, config.default_algorithm,
            cores=config.num_cores,
            context_switch=config.context_switch,
            config=config,
            validate=True
        )
    return simulate(
        workload, config.default_algorithm,
        quantum=args.quantum,
        context_switch=config.context_switch,
        config=config,
        validate=True
    )


def build_config(args) -> SimulationConfig:
    """Create and validate the configuration from command-line options."""
    config = SimulationConfig(
        context_switch=args.context_switch,
        num_cores=args.cores,
        process_quantum=args.process_quantum,
        thread_quantum=args.thread_quantum,
        max_ticks=args.max_ticks,
        num_processes=args.processes
    )
    if args.quantum is not None:
        config.time_quantum = args.quantum
    if args.algorithm is not None:
        config.default_algorithm = SchedulingAlgorithm(args.algorithm)

    result = ConfigValidator.validate_config(config)
    log_validation_result(result, "config")
    result.raise_if_invalid(ConfigurationError)

    # Generator bounds are only checked here
    try:
        config.validate()
    except ValueError as e:
        raise ConfigurationError(str(e), "config") from e
    return config


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} v{VERSION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py -a SRT                     Random workload with SRT
  python main.py -i jobs.json -a RR -q 2    Workload from a JSON file
  python main.py -a LPT --cores 2           Two processors
  python main.py --threads                  Process + thread scheduling
  python main.py --compare --seed 7         Compare all strategies
        """
    )

    parser.add_argument('--version', '-v', action='version', version=f'{APP_NAME} v{VERSION}')

    workload = parser.add_argument_group('workload')
    workload.add_argument('--input', '-i', help='JSON workload file (generates one if omitted)')
    workload.add_argument('--processes', '-n', type=int, default=8,
                          help='Number of processes to generate (default: 8)')
    workload.add_argument('--seed', type=int, default=None, help='Seed for the generated workload')

    sched = parser.add_argument_group('scheduling')
    sched.add_argument('--algorithm', '-a', type=str.upper, choices=ALGORITHM_CHOICES, default=None,
                       help='Scheduling strategy (default: FCFS)')
    sched.add_argument('--quantum', '-q', type=float, default=None,
                       help='Round Robin time quantum (default: 2)')
    sched.add_argument('--context-switch', '-c', type=float, default=0,
                       help='Context switch cost (default: 0)')
    sched.add_argument('--cores', '-p', type=int, default=1, help='Number of processors (default: 1)')
    sched.add_argument('--max-ticks', type=int, default=DEFAULT_MAX_TICKS,
                       help=f'Tick budget (default: {DEFAULT_MAX_TICKS})')

    threads = parser.add_argument_group('process + thread scheduling')
    threads.add_argument('--threads', action='store_true', help='Schedule processes and their threads')
    threads.add_argument('--process-algorithm', type=str.upper, choices=ALGORITHM_CHOICES, default='RR')
    threads.add_argument('--thread-algorithm', type=str.upper, choices=ALGORITHM_CHOICES, default='FCFS')
    threads.add_argument('--process-quantum', type=float, default=2)
    threads.add_argument('--thread-quantum', type=float, default=2)

    out = parser.add_argument_group('output')
    out.add_argument('--compare', action='store_true', help='Run every strategy on the workload')
    out.add_argument('--json', action='store_true', help='Print JSON instead of text')
    out.add_argument('--output', '-o', help='Also write the result to a JSON file')
    out.add_argument('--list-algorithms', action='store_true', help='Describe the strategies and exit')
    out.add_argument('--verbose', action='store_true', help='Log every scheduling decision')
    out.add_argument('--quiet', action='store_true', help='Only log warnings and errors')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.

    Returns:
        Process exit code: 0 on success, 1 on invalid input
    """
    args = create_parser().parse_args(argv)

    setup_logging(LoggingConfig(verbose=args.verbose))
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.list_algorithms:
        print_algorithms()
        return 0

    try:
        config = build_config(args)
        workload, hierarchical = build_workload(args, config)

        if args.compare:
            if hierarchical:
                raise ConfigurationError("--compare runs flat workloads only", "compare")
            if config.num_cores > 1:
                raise ConfigurationError("--compare runs on a single core", "cores",
                                         config.num_cores)
            data = run_comparison(workload, args, config)
        else:
            result = run_single(workload, hierarchical, args, config)
            data = result.to_dict()
            if args.json:
                print(json.dumps(data, indent=2))
            else:
                print_banner()
                print(format_result(result))
    except ValidationError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        path = DataExporter.export_json(data, args.output)
        logger.info(f"Results written to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
