"""
Utilities Module for CPU Scheduling Simulator

Logging setup, small statistics helpers and JSON import/export of
workloads and results.

Author: Student
Date: October 2026
"""

import json
import logging
import os
from typing import List, Dict, Any, Union, Sequence

import numpy as np

from config import LoggingConfig, DEFAULT_LOGGING_CONFIG
from process import Process, ProcessThreads, processes_from_dicts, process_threads_from_dicts
from validators import WorkloadError


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(config: LoggingConfig = None) -> logging.Logger:
    """
    Configure the root logger from a LoggingConfig.

    Safe to call more than once: previously installed handlers are replaced.

    Args:
        config: Logging configuration (uses default if None)

    Returns:
        The configured root logger
    """
    config = config or DEFAULT_LOGGING_CONFIG
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(config.log_format, datefmt=config.date_format)
    handlers: List[logging.Handler] = []
    if config.log_to_console:
        handlers.append(logging.StreamHandler())
    if config.log_to_file:
        handlers.append(logging.FileHandler(config.log_file_path))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(logging.DEBUG if config.verbose else logging.INFO)
    return root


# =============================================================================
# STATISTICS
# =============================================================================

def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


# =============================================================================
# IMPORT / EXPORT
# =============================================================================

Workload = Union[List[Process], List[ProcessThreads]]


def is_thread_workload(rows: List[Dict[str, Any]]) -> bool:
    """Rows describing processes by their threads carry a 'threads' key."""
    return any('threads' in row for row in rows)


def load_workload(path: str) -> Workload:
    """
    Load a workload from a JSON file.

    Accepted shapes: a list of rows, or an object with a "processes" list.
    Flat rows look like {"id": "P1", "arrival": 0, "burst": 3}; hierarchical
    rows like {"pid": "P1", "threads": [{"tid": "T1", "arrival": 0, "burst": 2}]}.

    Raises:
        WorkloadError: If the file cannot be read or has the wrong shape
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise WorkloadError(f"cannot read workload: {e}", "path", path) from e

    rows = data.get('processes') if isinstance(data, dict) else data
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise WorkloadError("workload must be a list of process objects", "path", path)

    try:
        if is_thread_workload(rows):
            return process_threads_from_dicts(rows)
        return processes_from_dicts(rows)
    except (TypeError, AttributeError) as e:
        raise WorkloadError(f"malformed process entry: {e}", "path", path) from e


class DataExporter:
    """Write simulation data to disk."""

    @staticmethod
    def export_json(data: Any, path: str, indent: int = 2) -> str:
        """
        Write data (dicts, lists or objects with to_dict()) as JSON.

        Returns:
            Absolute path of the written file
        """
        if hasattr(data, 'to_dict'):
            data = data.to_dict()
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent)
        return os.path.abspath(path)

    @staticmethod
    def export_workload(workload: Workload, path: str) -> str:
        """Write a workload in the format load_workload() reads."""
        return DataExporter.export_json([item.to_dict() for item in workload], path)
