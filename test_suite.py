"""
Comprehensive Test Suite for CPU Scheduling Simulator

This module provides unit tests, scenario tests and seeded property tests
for all components of the scheduling simulator.

Test Categories:
1. Unit Tests: time scaling, timelines, ready queue, strategies, validators
2. Scenario Tests: hand-checked schedules for every engine
3. Property Tests: invariants over seeded random workloads
4. Interface Tests: batch comparison, JSON import/export, command line

Testing Framework: unittest (Python standard library)

Author: Student
Date: October 2026
"""

import unittest
import sys
import os
import io
import json
import logging
import tempfile
from contextlib import redirect_stdout, redirect_stderr

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Import project modules
from config import (
    SchedulingAlgorithm,
    SimulationConfig,
    LoggingConfig,
    ALGORITHM_DESCRIPTIONS,
    CONTEXT_SWITCH_PROCESS,
    DEFAULT_MAX_TICKS,
    SLOT_GREEDY_ALGORITHMS
)
from process import Process, Thread, ProcessThreads, ProcessGenerator, processes_from_dicts
from time_scale import TimeScale, count_decimals, compute_scale, scale_to_int, unscale
from timeline import Timeline, Segment
from scheduling_algorithms import (
    ReadyQueue,
    EntityMeta,
    SimulationState,
    SchedulingContext,
    RoundRobinScheduler,
    FCFSScheduler,
    SchedulerFactory,
    pick_min,
    pick_max,
    select_candidate,
    parse_algorithm
)
from simulation import SimulationEngine, EngineStatus, BatchSimulator, simulate
from multicore_simulation import MultiCoreEngine, MultiCoreResult, simulate_multicore
from thread_simulation import ThreadSimulationEngine, simulate_threads
from metrics import ProcessMetrics, SimulationSummary, MetricsCalculator, MetricsComparator
from validators import (
    ValidationError,
    ConfigurationError,
    WorkloadError,
    SimulationError,
    ValidationResult,
    ConfigValidator,
    WorkloadValidator,
    require_positive,
    require_non_negative,
    safe_divide
)
from utils import DataExporter, calculate_mean, calculate_std_dev, load_workload, setup_logging
import main as cli

# Disable logging during tests unless debugging
logging.disable(logging.CRITICAL)


def segments(timeline):
    """Timeline as comparable (pid, start, end) tuples."""
    return [(s.pid, s.start, s.end) for s in timeline]


def workload(*rows):
    return [Process(pid, arrival, burst) for pid, arrival, burst in rows]


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

class TestConfig(unittest.TestCase):
    """Test configuration module and data classes."""

    def test_algorithm_identifiers(self):
        self.assertEqual(
            [a.value for a in SchedulingAlgorithm],
            ["FCFS", "LCFS", "RR", "SJF", "SRT", "HRRN", "LPT", "RPT"]
        )

    def test_preemptive_flags(self):
        preemptive = {a for a in SchedulingAlgorithm if a.is_preemptive}
        self.assertEqual(preemptive, {SchedulingAlgorithm.SRT, SchedulingAlgorithm.RPT,
                                      SchedulingAlgorithm.RR})
        self.assertTrue(SchedulingAlgorithm.RR.requires_quantum)
        self.assertFalse(SchedulingAlgorithm.SRT.requires_quantum)

    def test_every_algorithm_has_description(self):
        for algo in SchedulingAlgorithm:
            self.assertIn(algo, ALGORITHM_DESCRIPTIONS)

    def test_simulation_config_defaults(self):
        config = SimulationConfig()
        self.assertEqual(config.time_quantum, 2)
        self.assertEqual(config.context_switch, 0)
        self.assertEqual(config.num_cores, 1)
        self.assertEqual(config.process_quantum, 2)
        self.assertEqual(config.thread_quantum, 2)
        self.assertEqual(config.max_ticks, DEFAULT_MAX_TICKS)
        self.assertTrue(config.validate())

    def test_simulation_config_validation(self):
        with self.assertRaises(ValueError):
            SimulationConfig(time_quantum=0).validate()
        with self.assertRaises(ValueError):
            SimulationConfig(num_cores=0).validate()
        with self.assertRaises(ValueError):
            SimulationConfig(context_switch=-1).validate()
        with self.assertRaises(ValueError):
            SimulationConfig(min_burst_time=5, max_burst_time=2).validate()

    def test_config_dict_round_trip(self):
        config = SimulationConfig(num_cores=4, context_switch=1,
                                  default_algorithm=SchedulingAlgorithm.SRT)
        data = config.to_dict()
        self.assertEqual(data['default_algorithm'], "SRT")
        restored = SimulationConfig.from_dict(data)
        self.assertEqual(restored.num_cores, 4)
        self.assertEqual(restored.default_algorithm, SchedulingAlgorithm.SRT)

    def test_from_dict_ignores_unknown_keys(self):
        config = SimulationConfig.from_dict({'num_cores': 2, 'no_such_key': 1})
        self.assertEqual(config.num_cores, 2)
        self.assertFalse(hasattr(config, 'no_such_key'))

    def test_context_switch_tags(self):
        self.assertEqual(CONTEXT_SWITCH_PROCESS, "CS-P")
        self.assertEqual(SLOT_GREEDY_ALGORITHMS, {SchedulingAlgorithm.LPT, SchedulingAlgorithm.RPT})


# =============================================================================
# TEST PROCESS MODULE
# =============================================================================

class TestProcess(unittest.TestCase):
    """Test Process, Thread and ProcessThreads."""

    def test_process_creation(self):
        process = Process(pid="P1", arrival_time=2, burst_time=5)
        self.assertEqual(process.pid, "P1")
        self.assertEqual(process.arrival_time, 2)
        self.assertEqual(process.burst_time, 5)

    def test_process_is_immutable(self):
        process = Process("P1", 0, 3)
        with self.assertRaises(Exception):
            process.burst_time = 4

    def test_process_dict_keys(self):
        process = Process("P1", 1, 3)
        self.assertEqual(process.to_dict(), {'id': "P1", 'arrival': 1, 'burst': 3})
        self.assertEqual(Process.from_dict({'pid': "P2", 'arrival_time': 0, 'burst_time': 2}),
                         Process("P2", 0, 2))

    def test_process_threads_effective_values(self):
        group = ProcessThreads("A", [Thread("T1", 3, 2), Thread("T2", 1, 4)])
        self.assertEqual(group.arrival_time, 1)
        self.assertEqual(group.burst_time, 6)
        self.assertEqual(group.thread_key("T2"), "A:T2")

    def test_process_threads_from_dict(self):
        group = ProcessThreads.from_dict({
            'pid': "A", 'threads': [{'tid': "T1", 'arrival': 0, 'burst': 2}]
        })
        self.assertEqual(group.threads, [Thread("T1", 0, 2)])
        self.assertEqual(group.to_dict()['threads'][0]['tid'], "T1")


class TestProcessGenerator(unittest.TestCase):
    """Test ProcessGenerator factory class."""

    def test_seeded_generation_is_reproducible(self):
        first = ProcessGenerator(seed=42).generate_processes(10)
        second = ProcessGenerator(seed=42).generate_processes(10)
        self.assertEqual(first, second)

    def test_generated_attributes_within_bounds(self):
        config = SimulationConfig(min_burst_time=2, max_burst_time=4,
                                  min_arrival_time=1, max_arrival_time=3)
        for p in ProcessGenerator(config, seed=1).generate_processes(50):
            self.assertTrue(2 <= p.burst_time <= 4)
            self.assertTrue(1 <= p.arrival_time <= 3)

    def test_pids_are_sequential(self):
        generator = ProcessGenerator(seed=0)
        processes = generator.generate_processes(3)
        self.assertEqual([p.pid for p in processes], ["P1", "P2", "P3"])
        generator.reset()
        self.assertEqual(generator.generate_process().pid, "P1")

    def test_default_count_from_config(self):
        config = SimulationConfig(num_processes=5)
        self.assertEqual(len(ProcessGenerator(config, seed=0).generate_processes()), 5)

    def test_generate_process_threads(self):
        config = SimulationConfig(max_threads_per_process=3)
        groups = ProcessGenerator(config, seed=3).generate_process_threads(6)
        self.assertEqual(len(groups), 6)
        for group in groups:
            self.assertTrue(1 <= len(group.threads) <= 3)
            self.assertEqual([t.tid for t in group.threads],
                             [f"T{i + 1}" for i in range(len(group.threads))])

    def test_negative_count_rejected(self):
        with self.assertRaises(ValidationError):
            ProcessGenerator(seed=0).generate_processes(-1)
        with self.assertRaises(ValidationError):
            ProcessGenerator(seed=0).generate_process_threads(-2)

    def test_thread_limit_must_be_positive(self):
        config = SimulationConfig(max_threads_per_process=0)
        with self.assertRaises(ValidationError):
            ProcessGenerator(config, seed=0).generate_process_threads(2)

    def test_predefined_test_set(self):
        processes = ProcessGenerator().generate_predefined_test_set()
        self.assertEqual(len(processes), 10)
        self.assertEqual(processes[0], Process("P1", 0, 8))


# =============================================================================
# TEST TIME SCALING
# =============================================================================

class TestTimeScale(unittest.TestCase):
    """Test decimal detection and integer tick conversion."""

    def test_count_decimals(self):
        self.assertEqual(count_decimals(3), 0)
        self.assertEqual(count_decimals(3.0), 0)
        self.assertEqual(count_decimals(0.5), 1)
        self.assertEqual(count_decimals(1.25), 2)
        self.assertEqual(count_decimals(0.125), 3)
        self.assertEqual(count_decimals(float('inf')), 0)

    def test_compute_scale_caps_precision(self):
        self.assertEqual(compute_scale([1, 2, 3]), 1)
        self.assertEqual(compute_scale([1, 0.5]), 10)
        self.assertEqual(compute_scale([0.25, 1.5]), 100)
        self.assertEqual(compute_scale([0.125]), 100)
        self.assertEqual(compute_scale([]), 1)

    def test_scale_to_int_rounds_half_up(self):
        self.assertEqual(scale_to_int(0.125, 100), 13)
        self.assertEqual(scale_to_int(2.5, 1), 3)
        self.assertEqual(scale_to_int(1.5, 10), 15)
        self.assertEqual(unscale(15, 10), 1.5)

    def test_clamping(self):
        scale = TimeScale(100)
        self.assertEqual(scale.duration_ticks(0.001), 1)
        self.assertEqual(scale.arrival_ticks(0.001), 0)
        self.assertEqual(scale.cost_ticks(0), 0)

    def test_identity(self):
        self.assertTrue(TimeScale.from_values([1, 2.0, 7]).is_identity)
        self.assertFalse(TimeScale.from_values([1, 2.5]).is_identity)


# =============================================================================
# TEST TIMELINE
# =============================================================================

class TestTimeline(unittest.TestCase):
    """Test run-length merging and time accounting."""

    def test_consecutive_ticks_merge(self):
        timeline = Timeline()
        for t in range(3):
            timeline.record("P1", t)
        timeline.record("P2", 3)
        self.assertEqual(segments(timeline), [("P1", 0, 3), ("P2", 3, 4)])
        self.assertEqual(timeline.end, 4)

    def test_gap_starts_new_segment(self):
        timeline = Timeline()
        timeline.record("P1", 0)
        timeline.record("P1", 2)
        self.assertEqual(len(timeline), 2)

    def test_time_accounting(self):
        timeline = Timeline()
        for t, pid in enumerate(["P1", "P1", CONTEXT_SWITCH_PROCESS, None, "P2"]):
            timeline.record(pid, t)
        self.assertEqual(timeline.busy_time(), 3)
        self.assertEqual(timeline.context_switch_time(), 1)
        self.assertEqual(timeline.idle_time(), 1)
        self.assertTrue(timeline[1].is_context_switch)
        self.assertTrue(timeline[2].is_idle)

    def test_scaled_copy(self):
        timeline = Timeline([Segment("P1", 0, 15)])
        scaled = timeline.scaled(TimeScale(10))
        self.assertEqual(segments(scaled), [("P1", 0.0, 1.5)])
        self.assertEqual(segments(timeline), [("P1", 0, 15)])

    def test_empty_timeline(self):
        timeline = Timeline()
        self.assertEqual(timeline.end, 0)
        self.assertEqual(timeline.to_list(), [])


# =============================================================================
# TEST READY QUEUE AND SELECTION
# =============================================================================

class TestReadyQueue(unittest.TestCase):
    """Test the ordered ready queue."""

    def test_push_and_order(self):
        queue = ReadyQueue()
        queue.push_back("A")
        queue.push_back("B")
        queue.push_front("C")
        self.assertEqual(queue.to_list(), ["C", "A", "B"])
        self.assertEqual(queue.head(), "C")
        self.assertEqual(queue.tail(), "B")

    def test_remove(self):
        queue = ReadyQueue(["A", "B"])
        self.assertTrue(queue.remove("A"))
        self.assertFalse(queue.remove("Z"))
        self.assertEqual(queue.to_list(), ["B"])

    def test_empty_queue(self):
        queue = ReadyQueue()
        self.assertIsNone(queue.head())
        self.assertIsNone(queue.tail())
        self.assertEqual(len(queue), 0)

    def test_purge_keeps_order(self):
        queue = ReadyQueue(["A", "B", "C", "D"])
        removed = queue.purge(lambda x: x in ("B", "D"))
        self.assertEqual(removed, 2)
        self.assertEqual(queue.to_list(), ["A", "C"])
        self.assertIn("A", queue)
        self.assertNotIn("B", queue)


class TestSelection(unittest.TestCase):
    """Test the pure selection rules."""

    def setUp(self):
        self.meta = {
            "A": EntityMeta(0, 5),
            "B": EntityMeta(1, 2),
            "C": EntityMeta(2, 2),
            "D": EntityMeta(0, 8),
        }
        self.remaining = {"A": 3, "B": 2, "C": 2, "D": 8}

    def select(self, algo, ready, running=None, time=4):
        return select_candidate(algo, ready, running, self.meta, self.remaining, time)

    def test_pick_helpers_first_occurrence_wins(self):
        self.assertEqual(pick_min(["x", "y"], lambda _: 1), "x")
        self.assertEqual(pick_max(["x", "y"], lambda _: 1), "x")

    def test_non_preemptive_keep_running(self):
        for algo in (SchedulingAlgorithm.FCFS, SchedulingAlgorithm.LCFS, SchedulingAlgorithm.SJF,
                     SchedulingAlgorithm.LPT, SchedulingAlgorithm.HRRN):
            self.assertEqual(self.select(algo, ["B", "C"], running="A"), "A")

    def test_fcfs_and_lcfs(self):
        self.assertEqual(self.select(SchedulingAlgorithm.FCFS, ["C", "B"]), "C")
        self.assertEqual(self.select(SchedulingAlgorithm.LCFS, ["C", "B"]), "B")

    def test_sjf_tie_break(self):
        self.assertEqual(self.select(SchedulingAlgorithm.SJF, ["C", "B", "A"]), "C")

    def test_lpt(self):
        self.assertEqual(self.select(SchedulingAlgorithm.LPT, ["B", "D", "A"]), "D")

    def test_hrrn(self):
        # At t=4: A (4+5)/5 = 1.8, B (3+2)/2 = 2.5, C (2+2)/2 = 2.0
        self.assertEqual(self.select(SchedulingAlgorithm.HRRN, ["A", "B", "C"]), "B")

    def test_srt_and_rpt_consider_running(self):
        self.assertEqual(self.select(SchedulingAlgorithm.SRT, ["D"], running="A"), "A")
        self.assertEqual(self.select(SchedulingAlgorithm.RPT, ["D"], running="A"), "D")
        # Ready entries come before the running one on ties
        self.assertEqual(self.select(SchedulingAlgorithm.SRT, ["B"], running="C"), "B")

    def test_empty_ready_returns_running(self):
        self.assertIsNone(self.select(SchedulingAlgorithm.FCFS, []))
        self.assertEqual(self.select(SchedulingAlgorithm.SRT, [], running="A"), "A")


class TestRoundRobinScheduler(unittest.TestCase):
    """Test the Round Robin hooks."""

    def setUp(self):
        meta = {"A": EntityMeta(0, 3), "B": EntityMeta(0, 1)}
        self.state = SimulationState.for_entities(meta)
        self.ctx = SchedulingContext(state=self.state, meta=meta, quantum=2)
        self.rr = RoundRobinScheduler()
        self.rr.init(self.ctx)

    def test_quantum_floor(self):
        self.assertEqual(RoundRobinScheduler.slice_length(2.7), 2)
        self.assertEqual(RoundRobinScheduler.slice_length(0.4), 1)
        self.assertEqual(RoundRobinScheduler.slice_length(None), 1)

    def test_decide_opens_slice(self):
        self.state.ready.push_back("A")
        self.assertEqual(self.rr.decide(self.ctx), "A")
        self.assertEqual(self.rr.rr.slice_left, 2)
        self.assertEqual(self.rr.rr.current, "A")

    def test_slice_exhaustion_requeues(self):
        self.state.running = "A"
        self.rr.rr.slice_left = 1
        self.state.remaining["A"] = 2
        self.rr.on_tick_end(self.ctx, "A")
        self.assertIsNone(self.state.running)
        self.assertEqual(self.state.ready.to_list(), ["A"])

    def test_completion_closes_slice(self):
        self.state.running = None
        self.rr.rr.slice_left = 2
        self.state.remaining["B"] = 0
        self.rr.on_tick_end(self.ctx, "B")
        self.assertEqual(self.rr.rr.slice_left, 0)
        self.assertEqual(len(self.state.ready), 0)

    def test_running_keeps_cpu_when_alone(self):
        self.state.running = "A"
        self.rr.rr.slice_left = 0
        self.assertEqual(self.rr.decide(self.ctx), "A")

    def test_idle_tick_is_ignored(self):
        self.rr.rr.slice_left = 2
        self.rr.on_tick_end(self.ctx, None)
        self.assertEqual(self.rr.rr.slice_left, 2)


class TestSchedulerFactory(unittest.TestCase):
    """Test strategy registry."""

    def test_create_all(self):
        for algo in SchedulerFactory.get_all_algorithms():
            scheduler = SchedulerFactory.create_scheduler(algo)
            self.assertEqual(scheduler.algorithm, algo)
            self.assertEqual(scheduler.is_preemptive, algo.is_preemptive)

    def test_create_from_string(self):
        self.assertIsInstance(SchedulerFactory.create_scheduler("fcfs"), FCFSScheduler)
        self.assertIsInstance(SchedulerFactory.create_scheduler(" rr "), RoundRobinScheduler)

    def test_fresh_instances(self):
        first = SchedulerFactory.create_scheduler(SchedulingAlgorithm.RR)
        second = SchedulerFactory.create_scheduler(SchedulingAlgorithm.RR)
        self.assertIsNot(first, second)

    def test_unknown_algorithm(self):
        with self.assertRaises(ConfigurationError):
            SchedulerFactory.create_scheduler("EDF")
        with self.assertRaises(ConfigurationError):
            parse_algorithm("")

    def test_algorithm_info(self):
        info = SchedulerFactory.get_algorithm_info()
        self.assertEqual(len(info), 8)
        self.assertTrue(info["RR"]['requires_quantum'])
        self.assertFalse(info["SJF"]['preemptive'])


# =============================================================================
# TEST SINGLE-CORE ENGINE
# =============================================================================

class TestSimulationEngine(unittest.TestCase):
    """Hand-checked single-core schedules."""

    def test_fcfs(self):
        result = simulate(workload(("P1", 0, 3), ("P2", 1, 2)), "FCFS")
        self.assertEqual(segments(result.timeline), [("P1", 0, 3), ("P2", 3, 5)])
        self.assertEqual(result.process_metrics["P1"].waiting_time, 0)
        self.assertEqual(result.process_metrics["P2"].waiting_time, 2)
        self.assertEqual(result.summary.makespan, 5)
        self.assertEqual(result.summary.cpu_utilization, 1.0)

    def test_round_robin(self):
        result = simulate(workload(("P1", 0, 4), ("P2", 1, 2)), "RR", quantum=2)
        self.assertEqual(segments(result.timeline), [("P1", 0, 2), ("P2", 2, 4), ("P1", 4, 6)])

    def test_round_robin_single_process_merges(self):
        result = simulate(workload(("P1", 0, 3)), "RR", quantum=1)
        self.assertEqual(segments(result.timeline), [("P1", 0, 3)])

    def test_srt(self):
        result = simulate(workload(("P1", 0, 5), ("P2", 2, 2)), "SRT")
        self.assertEqual(segments(result.timeline), [("P1", 0, 2), ("P2", 2, 4), ("P1", 4, 7)])

    def test_srt_tie_prefers_ready(self):
        result = simulate(workload(("P1", 0, 3), ("P2", 1, 2)), "SRT")
        self.assertEqual(segments(result.timeline), [("P1", 0, 1), ("P2", 1, 3), ("P1", 3, 5)])

    def test_lcfs(self):
        result = simulate(workload(("P1", 0, 3), ("P2", 1, 1), ("P3", 2, 1)), "LCFS")
        self.assertEqual(segments(result.timeline), [("P1", 0, 3), ("P3", 3, 4), ("P2", 4, 5)])

    def test_sjf(self):
        result = simulate(workload(("P1", 0, 4), ("P2", 1, 3), ("P3", 2, 1)), "SJF")
        self.assertEqual(segments(result.timeline), [("P1", 0, 4), ("P3", 4, 5), ("P2", 5, 8)])

    def test_lpt(self):
        result = simulate(workload(("P1", 0, 1), ("P2", 0, 3), ("P3", 0, 2)), "LPT")
        self.assertEqual(segments(result.timeline), [("P2", 0, 3), ("P3", 3, 5), ("P1", 5, 6)])

    def test_hrrn(self):
        result = simulate(workload(("P1", 0, 3), ("P2", 1, 6), ("P3", 2, 2)), "HRRN")
        self.assertEqual(segments(result.timeline), [("P1", 0, 3), ("P3", 3, 5), ("P2", 5, 11)])

    def test_rpt(self):
        result = simulate(workload(("P1", 0, 2), ("P2", 1, 4)), "RPT")
        self.assertEqual(segments(result.timeline),
                         [("P1", 0, 1), ("P2", 1, 4), ("P1", 4, 5), ("P2", 5, 6)])

    def test_equal_arrivals_keep_input_order(self):
        result = simulate(workload(("P2", 0, 1), ("P1", 0, 1)), "FCFS")
        self.assertEqual(segments(result.timeline), [("P2", 0, 1), ("P1", 1, 2)])

    def test_idle_gap(self):
        result = simulate(workload(("P1", 0, 1), ("P2", 3, 1)), "FCFS")
        self.assertEqual(segments(result.timeline), [("P1", 0, 1), (None, 1, 3), ("P2", 3, 4)])
        self.assertEqual(result.summary.cpu_utilization, 0.5)
        self.assertEqual(result.summary.throughput, 0.5)

    def test_context_switch(self):
        result = simulate(workload(("P1", 0, 2), ("P2", 0, 2)), "FCFS", context_switch=1)
        self.assertEqual(segments(result.timeline),
                         [("P1", 0, 2), ("CS-P", 2, 3), ("P2", 3, 5)])
        self.assertEqual(result.summary.cpu_utilization, 0.8)

    def test_round_robin_with_context_switch(self):
        result = simulate(workload(("P1", 0, 2), ("P2", 0, 2)), "RR", quantum=1, context_switch=1)
        self.assertEqual(segments(result.timeline), [
            ("P1", 0, 1), ("CS-P", 1, 2), ("P2", 2, 3), ("CS-P", 3, 4),
            ("P1", 4, 5), ("CS-P", 5, 6), ("P2", 6, 7)
        ])

    def test_no_context_switch_before_first_run(self):
        result = simulate(workload(("P1", 2, 1)), "FCFS", context_switch=3)
        self.assertEqual(segments(result.timeline), [(None, 0, 2), ("P1", 2, 3)])

    def test_fractional_inputs(self):
        result = simulate(workload(("P1", 0, 1.5), ("P2", 0.5, 1)), "FCFS")
        self.assertEqual(segments(result.timeline), [("P1", 0.0, 1.5), ("P2", 1.5, 2.5)])
        self.assertAlmostEqual(result.process_metrics["P2"].waiting_time, 1.0)
        self.assertAlmostEqual(result.summary.throughput, 2 / 2.5)

    def test_fractional_quantum_is_scaled(self):
        result = simulate(workload(("P1", 0, 1), ("P2", 0, 1)), "RR", quantum=0.5)
        self.assertEqual(segments(result.timeline), [
            ("P1", 0.0, 0.5), ("P2", 0.5, 1.0), ("P1", 1.0, 1.5), ("P2", 1.5, 2.0)
        ])

    def test_rr_quantum_defaults_to_config(self):
        config = SimulationConfig(time_quantum=1)
        result = simulate(workload(("P1", 0, 2), ("P2", 0, 2)), "RR", config=config)
        self.assertEqual(segments(result.timeline),
                         [("P1", 0, 1), ("P2", 1, 2), ("P1", 2, 3), ("P2", 3, 4)])

    def test_truncated_run(self):
        result = simulate(workload(("P1", 0, 5), ("P2", 0, 2)), "FCFS", max_ticks=3)
        self.assertTrue(result.truncated)
        self.assertEqual(result.summary.makespan, 3)
        self.assertEqual(result.process_metrics["P1"].completion_time, 3)
        self.assertEqual(result.process_metrics["P2"].start_time, 0)
        self.assertEqual(result.process_metrics["P2"].completion_time, 3)

    def test_truncation_is_logged(self):
        logging.disable(logging.NOTSET)
        try:
            with self.assertLogs('simulation', level='WARNING'):
                simulate(workload(("P1", 0, 5)), "FCFS", max_ticks=2)
        finally:
            logging.disable(logging.CRITICAL)

    def test_zero_tick_budget_runs_nothing(self):
        result = simulate(workload(("P1", 0, 3)), "FCFS", max_ticks=0)
        self.assertEqual(result.ticks, 0)
        self.assertEqual(len(result.timeline), 0)
        self.assertTrue(result.truncated)
        self.assertEqual(result.summary.makespan, 0)

    def test_tick_budget_is_exact(self):
        result = simulate(workload(("P1", 0, 5)), "FCFS", max_ticks=1)
        self.assertEqual(result.ticks, 1)
        self.assertEqual(segments(result.timeline), [("P1", 0, 1)])

    def test_negative_tick_budget_rejected(self):
        with self.assertRaises(ValidationError):
            simulate(workload(("P1", 0, 1)), "FCFS", max_ticks=-1)

    def test_step_before_initialize(self):
        with self.assertRaises(SimulationError):
            SimulationEngine().step()

    def test_algorithm_defaults_to_config(self):
        config = SimulationConfig(default_algorithm=SchedulingAlgorithm.LCFS)
        result = simulate(workload(("P1", 0, 3), ("P2", 1, 1), ("P3", 2, 1)), config=config)
        self.assertEqual(result.algorithm, "LCFS")
        self.assertEqual(segments(result.timeline), [("P1", 0, 3), ("P3", 3, 4), ("P2", 4, 5)])

    def test_empty_workload(self):
        result = simulate([], "FCFS")
        self.assertEqual(len(result.timeline), 0)
        self.assertEqual(result.summary.makespan, 0)
        self.assertEqual(result.summary.throughput, 0.0)

    def test_step_by_step(self):
        engine = SimulationEngine()
        engine.initialize(workload(("P1", 0, 2)), SchedulingAlgorithm.FCFS)
        self.assertEqual(engine.status, EngineStatus.IDLE)
        self.assertTrue(engine.step())
        self.assertEqual(engine.get_current_state()['running'], "P1")
        self.assertFalse(engine.step())
        self.assertTrue(engine.is_complete())
        self.assertFalse(engine.step())

    def test_result_to_dict(self):
        data = simulate(workload(("P1", 0, 1)), "SJF").to_dict()
        self.assertEqual(data['algorithm'], "SJF")
        self.assertEqual(data['timeline'], [{'pid': "P1", 'start': 0, 'end': 1}])
        self.assertIn('avg_waiting_time', data['summary'])
        json.dumps(data)

    def test_validate_flag(self):
        with self.assertRaises(WorkloadError):
            simulate(workload(("P1", 0, 0)), "FCFS", validate=True)
        with self.assertRaises(WorkloadError):
            simulate(workload(("P1", 0, 1)), "RR", quantum=0, validate=True)
        result = simulate(workload(("P1", 0, 1)), "FCFS", validate=True)
        self.assertFalse(result.truncated)


# =============================================================================
# TEST MULTI-CORE ENGINE
# =============================================================================

class TestMultiCoreEngine(unittest.TestCase):
    """Hand-checked multi-core schedules."""

    def test_lpt_two_cores(self):
        result = simulate_multicore(workload(("P1", 0, 3), ("P2", 0, 1), ("P3", 0, 2)),
                                    "LPT", cores=2)
        starts = {pid: m.start_time for pid, m in result.process_metrics.items()}
        self.assertEqual(starts, {"P1": 0, "P2": 2, "P3": 0})
        self.assertEqual(segments(result.timelines[0]), [("P1", 0, 3)])
        self.assertEqual(segments(result.timelines[1]), [("P3", 0, 2), ("P2", 2, 3)])
        self.assertEqual(result.summary.cpu_utilization, 1.0)

    def test_rpt_takes_shortest_burst(self):
        result = simulate_multicore(workload(("P1", 0, 3), ("P2", 0, 1), ("P3", 0, 2)),
                                    "RPT", cores=2)
        self.assertEqual(segments(result.timelines[0]), [("P2", 0, 1), ("P1", 1, 4)])
        self.assertEqual(segments(result.timelines[1]), [("P3", 0, 2), (None, 2, 4)])
        self.assertEqual(result.summary.makespan, 4)

    def test_global_priority(self):
        result = simulate_multicore(workload(("P1", 0, 3), ("P2", 0, 1), ("P3", 0, 2)),
                                    "FCFS", cores=2)
        self.assertEqual(segments(result.timelines[0]), [("P1", 0, 3)])
        self.assertEqual(segments(result.timelines[1]), [("P3", 0, 2), ("P2", 2, 3)])

    def test_global_priority_has_no_context_switch(self):
        result = simulate_multicore(workload(("P1", 0, 2), ("P2", 0, 2)),
                                    "SRT", cores=1, context_switch=1)
        self.assertNotIn(CONTEXT_SWITCH_PROCESS, [s.pid for s in result.timeline])

    def test_slot_greedy_context_switch(self):
        result = simulate_multicore(workload(("P1", 0, 2), ("P2", 0, 1)),
                                    "LPT", cores=1, context_switch=1)
        self.assertEqual(segments(result.timeline), [("P1", 0, 2), ("CS-P", 2, 3), ("P2", 3, 4)])

    def test_result_shape(self):
        result = simulate_multicore(workload(("P1", 0, 1)), "LPT", cores=3)
        self.assertIsInstance(result, MultiCoreResult)
        self.assertEqual(result.cores, 3)
        self.assertEqual(len(result.timelines), 3)
        self.assertIs(result.timeline, result.timelines[0])
        self.assertAlmostEqual(result.summary.cpu_utilization, 1 / 3)
        self.assertEqual(len(result.to_dict()['timelines']), 3)

    def test_fractional_multicore(self):
        result = simulate_multicore(workload(("P1", 0, 0.5), ("P2", 0, 1.5)), "LPT", cores=2)
        self.assertEqual(segments(result.timelines[0]), [("P2", 0.0, 1.5)])
        self.assertEqual(result.summary.makespan, 1.5)

    def test_engine_defaults_to_one_core(self):
        engine = MultiCoreEngine()
        engine.initialize(workload(("P1", 0, 1)), 0, SchedulingAlgorithm.LPT)
        self.assertEqual(len(engine.processors), 1)

    def test_id_tie_break_is_case_insensitive(self):
        result = simulate_multicore(workload(("B", 0, 2), ("b", 0, 2)), "FCFS", cores=1)
        self.assertEqual(segments(result.timeline), [("b", 0, 1), ("B", 1, 3), ("b", 3, 4)])

    def test_id_tie_break_ignores_case_before_code_point(self):
        result = simulate_multicore(workload(("Z", 0, 1), ("a", 0, 1)), "FCFS", cores=1)
        self.assertEqual(segments(result.timeline), [("a", 0, 1), ("Z", 1, 2)])

    def test_zero_tick_budget_runs_nothing(self):
        result = simulate_multicore(workload(("P1", 0, 3)), "LPT", cores=2, max_ticks=0)
        self.assertEqual(result.ticks, 0)
        self.assertTrue(result.truncated)
        self.assertEqual(result.summary.makespan, 0)
        for timeline in result.timelines:
            self.assertEqual(len(timeline), 0)

    def test_step_before_initialize(self):
        with self.assertRaises(SimulationError):
            MultiCoreEngine().step()

    def test_algorithm_defaults_to_config(self):
        config = SimulationConfig(default_algorithm=SchedulingAlgorithm.LPT)
        result = simulate_multicore(workload(("P1", 0, 1), ("P2", 0, 3)), cores=1, config=config)
        self.assertEqual(result.algorithm, "LPT")
        self.assertEqual(segments(result.timeline), [("P2", 0, 3), ("P1", 3, 4)])


# =============================================================================
# TEST HIERARCHICAL ENGINE
# =============================================================================

class TestThreadSimulation(unittest.TestCase):
    """Hand-checked process + thread schedules."""

    def test_fcfs_fcfs(self):
        groups = [
            ProcessThreads("A", [Thread("T1", 0, 2), Thread("T2", 0, 1)]),
            ProcessThreads("B", [Thread("T1", 1, 2)]),
        ]
        result = simulate_threads(groups, "FCFS", "FCFS")
        self.assertEqual(segments(result.timeline),
                         [("A:T1", 0, 2), ("A:T2", 2, 3), ("B:T1", 3, 5)])
        self.assertEqual(list(result.process_metrics), ["A:T1", "A:T2", "B:T1"])
        self.assertEqual(result.process_metrics["B:T1"].waiting_time, 2)
        self.assertEqual(result.algorithm, "FCFS/FCFS")

    def test_process_round_robin(self):
        groups = [
            ProcessThreads("A", [Thread("T1", 0, 3)]),
            ProcessThreads("B", [Thread("T1", 0, 3)]),
        ]
        result = simulate_threads(groups, "RR", "FCFS", process_quantum=2)
        self.assertEqual(segments(result.timeline),
                         [("A:T1", 0, 2), ("B:T1", 2, 4), ("A:T1", 4, 5), ("B:T1", 5, 6)])

    def test_thread_round_robin(self):
        groups = [ProcessThreads("A", [Thread("T1", 0, 2), Thread("T2", 0, 2)])]
        result = simulate_threads(groups, "FCFS", "RR", thread_quantum=1)
        self.assertEqual(segments(result.timeline),
                         [("A:T1", 0, 1), ("A:T2", 1, 2), ("A:T1", 2, 3), ("A:T2", 3, 4)])

    def test_idle_until_first_arrival(self):
        result = simulate_threads([ProcessThreads("A", [Thread("T1", 2, 1)])], "SJF", "SJF")
        self.assertEqual(segments(result.timeline), [(None, 0, 2), ("A:T1", 2, 3)])
        self.assertAlmostEqual(result.summary.cpu_utilization, 1 / 3)

    def test_no_context_switch_tags(self):
        groups = ProcessGenerator(seed=5).generate_process_threads(4)
        result = simulate_threads(groups, "RR", "RR", process_quantum=1, thread_quantum=1)
        for segment in result.timeline:
            self.assertFalse(segment.is_context_switch)

    def test_fractional_threads(self):
        groups = [ProcessThreads("A", [Thread("T1", 0, 0.5), Thread("T2", 0.25, 0.25)])]
        result = simulate_threads(groups, "FCFS", "FCFS")
        self.assertEqual(segments(result.timeline), [("A:T1", 0.0, 0.5), ("A:T2", 0.5, 0.75)])

    def test_validate_flag(self):
        with self.assertRaises(WorkloadError):
            simulate_threads([ProcessThreads("A", [])], "FCFS", "FCFS", validate=True)

    def test_zero_tick_budget_runs_nothing(self):
        groups = [ProcessThreads("A", [Thread("T1", 0, 2)])]
        result = simulate_threads(groups, "FCFS", "FCFS", max_ticks=0)
        self.assertEqual(result.ticks, 0)
        self.assertEqual(len(result.timeline), 0)
        self.assertTrue(result.truncated)

    def test_step_before_initialize(self):
        with self.assertRaises(SimulationError):
            ThreadSimulationEngine().step()

    def test_engine_state(self):
        engine = ThreadSimulationEngine()
        engine.initialize([ProcessThreads("A", [Thread("T1", 0, 2)])], "FCFS", "FCFS")
        engine.step()
        state = engine.get_current_state()
        self.assertEqual(state['running_process'], "A")
        self.assertEqual(state['running_thread'], "A:T1")


# =============================================================================
# TEST METRICS
# =============================================================================

class TestMetricsCalculator(unittest.TestCase):
    """Test metric derivation."""

    def test_process_metrics(self):
        metrics = MetricsCalculator.process_metrics(
            {"P1": (1, 3)}, {"P1": 2}, {"P1": 6}, makespan=6
        )["P1"]
        self.assertEqual(metrics.turnaround_time, 5)
        self.assertEqual(metrics.waiting_time, 2)
        self.assertEqual(metrics.response_time, 1)

    def test_fallbacks(self):
        metrics = MetricsCalculator.process_metrics(
            {"P1": (2, 3)}, {"P1": None}, {"P1": None}, makespan=10
        )["P1"]
        self.assertEqual(metrics.start_time, 2)
        self.assertEqual(metrics.completion_time, 10)

    def test_summary(self):
        per = {
            "A": ProcessMetrics(0, 2, 2, 0, 0),
            "B": ProcessMetrics(2, 4, 4, 2, 2),
        }
        summary = MetricsCalculator.summarise(per, makespan=4, busy_time=4, resources=2)
        self.assertEqual(summary.cpu_utilization, 0.5)
        self.assertEqual(summary.throughput, 0.5)
        self.assertEqual(summary.avg_waiting_time, 1.0)
        self.assertEqual(summary.avg_turnaround_time, 3.0)

    def test_zero_makespan(self):
        summary = MetricsCalculator.summarise({}, makespan=0, busy_time=0)
        self.assertEqual(summary, SimulationSummary())


class TestMetricsComparator(unittest.TestCase):
    """Test strategy ranking."""

    def setUp(self):
        self.comparator = MetricsComparator()
        self.comparator.add_result("FCFS", SimulationSummary(makespan=10, avg_waiting_time=4,
                                                             cpu_utilization=0.8, throughput=0.3))
        self.comparator.add_result("SJF", SimulationSummary(makespan=10, avg_waiting_time=2,
                                                            cpu_utilization=0.9, throughput=0.3))

    def test_lower_is_better(self):
        self.assertEqual(self.comparator.get_best_algorithm('avg_waiting_time'), "SJF")

    def test_higher_is_better(self):
        self.assertEqual(self.comparator.get_best_algorithm('cpu_utilization'), "SJF")

    def test_ties_keep_insertion_order(self):
        self.assertEqual(self.comparator.get_best_algorithm('throughput'), "FCFS")

    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            self.comparator.ranking('fairness')

    def test_report_and_clear(self):
        report = self.comparator.generate_report()
        self.assertIn("FCFS", report)
        self.assertIn("SJF", report)
        self.comparator.clear()
        self.assertIsNone(self.comparator.get_best_algorithm())


class TestBatchSimulator(unittest.TestCase):
    """Test strategy comparison on one workload."""

    def test_run_comparison_all(self):
        batch = BatchSimulator()
        processes = ProcessGenerator().generate_predefined_test_set()
        results = batch.run_comparison(processes=processes)
        self.assertEqual(list(results), [a.value for a in SchedulingAlgorithm])

        best = batch.get_best_algorithm('avg_waiting_time')
        lowest = min(r.summary.avg_waiting_time for r in results.values())
        self.assertEqual(results[best].summary.avg_waiting_time, lowest)
        self.assertLessEqual(results["SRT"].summary.avg_waiting_time,
                             results["FCFS"].summary.avg_waiting_time)
        self.assertIn("HRRN", batch.get_comparison_report())

    def test_seeded_workload(self):
        config = SimulationConfig(num_processes=4)
        first = BatchSimulator(config).run_comparison(
            algorithms=[SchedulingAlgorithm.FCFS], seed=9)
        second = BatchSimulator(config).run_comparison(algorithms=["fcfs"], seed=9)
        self.assertEqual(first["FCFS"].to_dict(), second["FCFS"].to_dict())


# =============================================================================
# TEST VALIDATORS
# =============================================================================

class TestValidators(unittest.TestCase):
    """Test input validation and guard helpers."""

    def test_validation_error_message(self):
        error = ValidationError("must be positive", "burst", -1)
        self.assertIn("'burst'", str(error))
        self.assertIn("value=-1", str(error))
        self.assertTrue(issubclass(WorkloadError, ValidationError))

    def test_validation_result_merge(self):
        result = ValidationResult.success()
        result.merge(ValidationResult.failure("bad"))
        self.assertFalse(result)
        self.assertEqual(result.errors, ["bad"])
        with self.assertRaises(WorkloadError):
            result.raise_if_invalid(WorkloadError)

    def test_valid_processes(self):
        self.assertTrue(WorkloadValidator.validate_processes(workload(("P1", 0, 1), ("P2", 2, 3))))

    def test_invalid_processes(self):
        self.assertFalse(WorkloadValidator.validate_processes([]))
        self.assertFalse(WorkloadValidator.validate_processes(workload(("P1", 0, 1), ("P1", 1, 1))))
        self.assertFalse(WorkloadValidator.validate_processes(workload(("P1", -1, 1))))
        self.assertFalse(WorkloadValidator.validate_processes(workload(("P1", 0, 0))))
        self.assertFalse(WorkloadValidator.validate_processes(workload(("P1", 0, float('nan')))))

    def test_collects_every_error(self):
        result = WorkloadValidator.validate_processes(workload(("P1", -1, 0)))
        self.assertEqual(len(result.errors), 2)

    def test_precision_warning(self):
        result = WorkloadValidator.validate_processes(workload(("P1", 0, 1.125)))
        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.warnings), 1)

    def test_thread_workload(self):
        ok = [ProcessThreads("A", [Thread("T1", 0, 1)])]
        self.assertTrue(WorkloadValidator.validate_process_threads(ok))
        self.assertFalse(WorkloadValidator.validate_process_threads([ProcessThreads("A", [])]))
        duplicate = [ProcessThreads("A", [Thread("T1", 0, 1), Thread("T1", 1, 1)])]
        self.assertFalse(WorkloadValidator.validate_process_threads(duplicate))

    def test_strategy_quantum(self):
        self.assertTrue(WorkloadValidator.validate_strategy(SchedulingAlgorithm.FCFS, None))
        self.assertFalse(WorkloadValidator.validate_strategy(SchedulingAlgorithm.RR, None))
        self.assertFalse(WorkloadValidator.validate_strategy(SchedulingAlgorithm.RR, 0))
        self.assertTrue(WorkloadValidator.validate_strategy(SchedulingAlgorithm.RR, 0.5))

    def test_config_validator(self):
        self.assertTrue(ConfigValidator.validate_config(SimulationConfig()))
        self.assertFalse(ConfigValidator.validate_config(SimulationConfig(num_cores=0)))
        self.assertFalse(ConfigValidator.validate_config(SimulationConfig(max_ticks=0)))
        self.assertFalse(ConfigValidator.validate_num_cores(2.0))

    def test_guards(self):
        self.assertEqual(require_positive(3, "x"), 3)
        self.assertEqual(require_non_negative(0, "x"), 0)
        with self.assertRaises(ValidationError):
            require_positive(0, "x")
        with self.assertRaises(ValidationError):
            require_non_negative(-0.5, "x")

    def test_safe_divide(self):
        self.assertEqual(safe_divide(1, 4), 0.25)
        self.assertEqual(safe_divide(1, 0), 0.0)
        self.assertEqual(safe_divide(1, 0, default=-1), -1)
        self.assertEqual(safe_divide(None, 2), 0.0)


# =============================================================================
# TEST UTILITIES
# =============================================================================

class TestUtils(unittest.TestCase):
    """Test statistics, logging setup and JSON I/O."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def write_json(self, name, data):
        path = self.path(name)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f)
        return path

    def test_statistics(self):
        self.assertEqual(calculate_mean([1, 2, 3]), 2.0)
        self.assertEqual(calculate_mean([]), 0.0)
        self.assertAlmostEqual(calculate_std_dev([2, 4]), 1.0)
        self.assertEqual(calculate_std_dev([]), 0.0)

    def test_setup_logging(self):
        root = setup_logging(LoggingConfig(log_to_console=True, verbose=True))
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        root = setup_logging(LoggingConfig(log_to_console=False))
        self.assertEqual(root.handlers, [])

    def test_setup_logging_to_file(self):
        config = LoggingConfig(log_to_console=False, log_to_file=True,
                               log_file_path=self.path("run.log"))
        root = setup_logging(config)
        self.assertIsInstance(root.handlers[0], logging.FileHandler)
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)

    def test_module_headers(self):
        names = ('config', 'process', 'time_scale', 'timeline', 'scheduling_algorithms',
                 'simulation', 'multicore_simulation', 'thread_simulation', 'metrics',
                 'utils', 'validators', 'main')
        for name in names:
            with self.subTest(module=name):
                doc = sys.modules[name].__doc__
                self.assertIn("Author:", doc)
                self.assertIn("Date:", doc)

    def test_load_flat_workload(self):
        path = self.write_json("flat.json", [{'id': "P1", 'arrival': 0, 'burst': 3}])
        self.assertEqual(load_workload(path), [Process("P1", 0, 3)])

    def test_load_wrapped_thread_workload(self):
        path = self.write_json("threads.json", {'processes': [
            {'pid': "A", 'threads': [{'tid': "T1", 'arrival': 0, 'burst': 2}]}
        ]})
        groups = load_workload(path)
        self.assertEqual(groups, [ProcessThreads("A", [Thread("T1", 0, 2)])])

    def test_load_errors(self):
        with self.assertRaises(WorkloadError):
            load_workload(self.path("missing.json"))
        bad = self.path("bad.json")
        with open(bad, 'w', encoding='utf-8') as f:
            f.write("{not json")
        with self.assertRaises(WorkloadError):
            load_workload(bad)
        with self.assertRaises(WorkloadError):
            load_workload(self.write_json("scalar.json", 3))

    def test_export_workload_is_loadable(self):
        processes = processes_from_dicts([{'id': "P1", 'arrival': 1, 'burst': 2}])
        path = DataExporter.export_workload(processes, self.path("out.json"))
        self.assertEqual(load_workload(path), processes)

    def test_export_result(self):
        result = simulate(workload(("P1", 0, 1)), "FCFS")
        path = DataExporter.export_json(result, self.path("result.json"))
        with open(path, encoding='utf-8') as f:
            self.assertEqual(json.load(f)['algorithm'], "FCFS")


# =============================================================================
# TEST COMMAND LINE
# =============================================================================

class TestCommandLine(unittest.TestCase):
    """Test main.py entry point."""

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(list(argv) + ['--quiet'])
        return code, out.getvalue()

    def test_generated_workload(self):
        code, output = self.run_cli('-a', 'srt', '--seed', '1', '-n', '4')
        self.assertEqual(code, 0)
        self.assertIn("[SRT]", output)
        self.assertIn("Avg Waiting Time", output)

    def test_json_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "w.json")
            with open(path, 'w', encoding='utf-8') as f:
                json.dump([{'id': "P1", 'arrival': 0, 'burst': 3},
                           {'id': "P2", 'arrival': 1, 'burst': 2}], f)
            code, output = self.run_cli('-i', path, '-a', 'FCFS', '--json')
        self.assertEqual(code, 0)
        data = json.loads(output)
        self.assertEqual(data['timeline'], [
            {'pid': "P1", 'start': 0, 'end': 3},
            {'pid': "P2", 'start': 3, 'end': 5}
        ])

    def test_multicore(self):
        code, output = self.run_cli('-a', 'LPT', '--cores', '2', '--seed', '2', '--json')
        self.assertEqual(code, 0)
        self.assertEqual(len(json.loads(output)['timelines']), 2)

    def test_threads(self):
        code, output = self.run_cli('--threads', '--seed', '3', '-n', '3', '--json')
        self.assertEqual(code, 0)
        data = json.loads(output)
        self.assertEqual(data['algorithm'], "RR/FCFS")
        self.assertTrue(all(':' in key for key in data['process_metrics']))

    def test_compare(self):
        code, output = self.run_cli('--compare', '--seed', '4', '--json')
        self.assertEqual(code, 0)
        data = json.loads(output)
        self.assertEqual(len(data['results']), 8)
        self.assertIn('avg_waiting_time', data['best'])

    def test_output_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "result.json")
            code, _ = self.run_cli('-a', 'HRRN', '--seed', '5', '-o', path)
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(path))

    def test_invalid_config_exit_code(self):
        code, _ = self.run_cli('--max-ticks', '0')
        self.assertEqual(code, 1)

    def test_invalid_workload_exit_code(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "w.json")
            with open(path, 'w', encoding='utf-8') as f:
                json.dump([{'id': "P1", 'arrival': 0, 'burst': 0}], f)
            code, _ = self.run_cli('-i', path)
        self.assertEqual(code, 1)

    def test_compare_rejects_multiple_cores(self):
        code, output = self.run_cli('--compare', '--cores', '2', '--seed', '1')
        self.assertEqual(code, 1)
        self.assertIn("single core", output)

    def test_invalid_generator_bounds_exit_code(self):
        code, _ = self.run_cli('-n', '0')
        self.assertEqual(code, 1)

    def test_algorithm_defaults_to_fcfs(self):
        code, output = self.run_cli('--seed', '1', '--json')
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)['algorithm'], "FCFS")

    def test_version(self):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(['--version'])
        self.assertEqual(ctx.exception.code, 0)

    def test_list_algorithms(self):
        code, output = self.run_cli('--list-algorithms')
        self.assertEqual(code, 0)
        self.assertIn("Highest Response Ratio Next", output)


# =============================================================================
# PROPERTY TESTS
# =============================================================================

class TestProperties(unittest.TestCase):
    """Invariants over seeded random workloads."""

    SEEDS = range(12)

    def random_workload(self, seed, count=6):
        config = SimulationConfig(num_processes=count, max_arrival_time=8, max_burst_time=6)
        return ProcessGenerator(config, seed=seed).generate_processes()

    def assert_partition(self, timeline, makespan):
        cursor = 0
        previous = object()
        for segment in timeline:
            self.assertEqual(segment.start, cursor)
            self.assertGreater(segment.end, segment.start)
            self.assertNotEqual(segment.pid, previous)
            cursor = segment.end
            previous = segment.pid
        self.assertEqual(cursor, makespan)

    def assert_metrics_sane(self, result, bursts):
        self.assertFalse(result.truncated)
        for pid, m in result.process_metrics.items():
            self.assertGreaterEqual(m.waiting_time, 0)
            self.assertGreaterEqual(m.response_time, 0)
            self.assertGreaterEqual(m.turnaround_time, bursts[pid])

    def test_single_core_invariants(self):
        for seed in self.SEEDS:
            processes = self.random_workload(seed)
            bursts = {p.pid: p.burst_time for p in processes}
            for algo in SchedulingAlgorithm:
                for cs in (0, 1):
                    with self.subTest(seed=seed, algo=algo.value, cs=cs):
                        result = simulate(processes, algo, quantum=2, context_switch=cs)
                        self.assert_partition(result.timeline, result.summary.makespan)
                        self.assert_metrics_sane(result, bursts)
                        self.assertLessEqual(result.summary.cpu_utilization, 1.0)

    def test_multicore_invariants(self):
        for seed in self.SEEDS:
            processes = self.random_workload(seed)
            bursts = {p.pid: p.burst_time for p in processes}
            for algo in SchedulingAlgorithm:
                for cores in (2, 3):
                    with self.subTest(seed=seed, algo=algo.value, cores=cores):
                        result = simulate_multicore(processes, algo, cores=cores, context_switch=1)
                        for timeline in result.timelines:
                            self.assert_partition(timeline, result.summary.makespan)
                        self.assert_metrics_sane(result, bursts)

    def test_thread_invariants(self):
        config = SimulationConfig(num_processes=4, max_arrival_time=6, max_burst_time=5)
        for seed in range(4):
            groups = ProcessGenerator(config, seed=seed).generate_process_threads()
            bursts = {g.thread_key(t.tid): t.burst_time for g in groups for t in g.threads}
            for p_algo in SchedulingAlgorithm:
                for t_algo in SchedulingAlgorithm:
                    with self.subTest(seed=seed, process=p_algo.value, thread=t_algo.value):
                        result = simulate_threads(groups, p_algo, t_algo,
                                                  process_quantum=2, thread_quantum=1)
                        self.assert_partition(result.timeline, result.summary.makespan)
                        self.assert_metrics_sane(result, bursts)
                        self.assertEqual(set(result.process_metrics), set(bursts))

    def test_determinism(self):
        processes = self.random_workload(99)
        for algo in SchedulingAlgorithm:
            first = simulate(processes, algo, quantum=3, context_switch=1)
            second = simulate(processes, algo, quantum=3, context_switch=1)
            self.assertEqual(first.to_dict(), second.to_dict())

    def test_scaling_round_trip(self):
        for seed in range(6):
            processes = self.random_workload(seed)
            tenths = [Process(p.pid, p.arrival_time / 10, p.burst_time / 10) for p in processes]
            for algo in SchedulingAlgorithm:
                with self.subTest(seed=seed, algo=algo.value):
                    whole = simulate(processes, algo, quantum=2)
                    scaled = simulate(tenths, algo, quantum=0.2)
                    self.assertEqual(len(whole.timeline), len(scaled.timeline))
                    for a, b in zip(whole.timeline, scaled.timeline):
                        self.assertEqual(a.pid, b.pid)
                        self.assertAlmostEqual(a.start / 10, b.start)
                        self.assertAlmostEqual(a.end / 10, b.end)
                    for pid, m in whole.process_metrics.items():
                        self.assertAlmostEqual(m.waiting_time / 10,
                                               scaled.process_metrics[pid].waiting_time)
                    self.assertAlmostEqual(whole.summary.cpu_utilization,
                                           scaled.summary.cpu_utilization)


# =============================================================================
# TEST RUNNERS
# =============================================================================

def run_all_tests(verbosity=2):
    """Run all tests with specified verbosity."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestConfig,
        TestProcess,
        TestProcessGenerator,
        TestTimeScale,
        TestTimeline,
        TestReadyQueue,
        TestSelection,
        TestRoundRobinScheduler,
        TestSchedulerFactory,
        TestSimulationEngine,
        TestMultiCoreEngine,
        TestThreadSimulation,
        TestMetricsCalculator,
        TestMetricsComparator,
        TestBatchSimulator,
        TestValidators,
        TestUtils,
        TestCommandLine,
        TestProperties,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=verbosity)
    return runner.run(suite)


def run_quick_tests():
    """Run a quick subset of critical tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    critical_tests = [
        TestConfig,
        TestSelection,
        TestSimulationEngine,
        TestMultiCoreEngine,
        TestThreadSimulation,
    ]

    for test_class in critical_tests:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    return runner.run(suite)


if __name__ == '__main__':
    print("=" * 70)
    print("CPU SCHEDULING SIMULATOR - TEST SUITE")
    print("=" * 70)

    result = run_all_tests(verbosity=2)

    print()
    print("=" * 70)
    print(f"Tests Run: {result.testsRun}")
    print(f"Failures: {len(result.failures)}")
    print(f"Errors: {len(result.errors)}")
    print("=" * 70)

    sys.exit(0 if result.wasSuccessful() else 1)
