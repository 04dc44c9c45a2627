"""
Validators Module for CPU Scheduling Simulator

The engines assume well-formed input and never re-check it. This module is
the collaborator that makes that assumption safe: it validates
configuration and workloads before they reach an engine.

Validation Categories:
1. Configuration Validation: SimulationConfig parameters
2. Workload Validation: process and thread attributes, id uniqueness
3. Strategy Validation: quantum required by Round Robin

Design Philosophy:
- Fail fast with clear error messages
- Collect every problem of a workload in one ValidationResult
- Log validation failures for debugging

Author: Student
Date: October 2026
"""

import logging
import math
from typing import Optional, Any, List, Union, Iterable
from dataclasses import dataclass, field

from config import SimulationConfig, SchedulingAlgorithm, DEFAULT_MAX_DECIMAL_PLACES
from time_scale import count_decimals


logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.field and self.value is not None:
            return f"Validation error for '{self.field}' (value={self.value}): {self.message}"
        elif self.field:
            return f"Validation error for '{self.field}': {self.message}"
        return f"Validation error: {self.message}"


class ConfigurationError(ValidationError):
    """Exception for configuration-related validation errors."""
    pass


class WorkloadError(ValidationError):
    """Exception for invalid processes or threads."""
    pass


class SimulationError(ValidationError):
    """Exception for simulation-related errors."""
    pass


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of a validation operation.

    Provides detailed information about validation success/failure.
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    field: Optional[str] = None

    def __bool__(self) -> bool:
        """Allow using ValidationResult in boolean context."""
        return self.is_valid

    @staticmethod
    def success() -> 'ValidationResult':
        """Create a successful validation result."""
        return ValidationResult(is_valid=True, errors=[], warnings=[])

    @staticmethod
    def failure(error: str, field: str = None) -> 'ValidationResult':
        """Create a failed validation result."""
        return ValidationResult(
            is_valid=False,
            errors=[error],
            warnings=[],
            field=field
        )

    def add_error(self, error: str):
        """Add an error to the result."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add a warning to the result."""
        self.warnings.append(warning)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.is_valid = self.is_valid and other.is_valid
        return self

    def raise_if_invalid(self, error_cls=ValidationError) -> None:
        """Raise error_cls carrying every error message when invalid."""
        if not self.is_valid:
            raise error_cls("; ".join(self.errors), self.field)


# =============================================================================
# CONFIGURATION VALIDATORS
# =============================================================================

class ConfigValidator:
    """Validator for simulation configuration parameters."""

    # Absolute bounds for configuration values
    MIN_CORES = 1
    MAX_CORES = 64
    MAX_TICKS_LIMIT = 10_000_000

    @classmethod
    def validate_config(cls, config: SimulationConfig) -> ValidationResult:
        """
        Validate entire simulation configuration.

        Args:
            config: SimulationConfig to validate

        Returns:
            ValidationResult with all errors and warnings
        """
        result = ValidationResult.success()

        result.merge(cls.validate_num_cores(config.num_cores))
        result.merge(cls.validate_quantum(config.time_quantum, "time_quantum"))
        result.merge(cls.validate_quantum(config.process_quantum, "process_quantum"))
        result.merge(cls.validate_quantum(config.thread_quantum, "thread_quantum"))
        result.merge(cls.validate_context_switch(config.context_switch))
        result.merge(cls.validate_max_ticks(config.max_ticks))
        result.merge(cls.validate_decimal_places(config.max_decimal_places))

        if config.max_decimal_places > DEFAULT_MAX_DECIMAL_PLACES:
            result.add_warning(
                f"max_decimal_places={config.max_decimal_places} multiplies the tick count "
                f"by {10 ** config.max_decimal_places}; long runs may hit max_ticks"
            )

        return result

    @classmethod
    def validate_num_cores(cls, value: int) -> ValidationResult:
        """Validate number of cores."""
        if not isinstance(value, int) or isinstance(value, bool):
            return ValidationResult.failure(
                f"num_cores must be an integer, got {type(value).__name__}",
                "num_cores"
            )
        if value < cls.MIN_CORES:
            return ValidationResult.failure(
                f"num_cores must be at least {cls.MIN_CORES}, got {value}",
                "num_cores"
            )
        if value > cls.MAX_CORES:
            return ValidationResult.failure(
                f"num_cores must be at most {cls.MAX_CORES}, got {value}",
                "num_cores"
            )
        return ValidationResult.success()

    @classmethod
    def validate_quantum(cls, value: float, name: str = "time_quantum") -> ValidationResult:
        """Validate a Round Robin quantum."""
        if not _is_number(value):
            return ValidationResult.failure(
                f"{name} must be a number, got {type(value).__name__}", name
            )
        if value <= 0:
            return ValidationResult.failure(f"{name} must be positive, got {value}", name)
        return ValidationResult.success()

    @classmethod
    def validate_context_switch(cls, value: float) -> ValidationResult:
        """Validate context switch cost."""
        if not _is_number(value):
            return ValidationResult.failure(
                f"context_switch must be a number, got {type(value).__name__}",
                "context_switch"
            )
        if value < 0:
            return ValidationResult.failure(
                f"context_switch cannot be negative, got {value}", "context_switch"
            )
        return ValidationResult.success()

    @classmethod
    def validate_max_ticks(cls, value: int) -> ValidationResult:
        """Validate the tick budget."""
        if not isinstance(value, int) or value < 1:
            return ValidationResult.failure("max_ticks must be a positive integer", "max_ticks")
        if value > cls.MAX_TICKS_LIMIT:
            return ValidationResult.failure(
                f"max_ticks must be at most {cls.MAX_TICKS_LIMIT}", "max_ticks"
            )
        return ValidationResult.success()

    @classmethod
    def validate_decimal_places(cls, value: int) -> ValidationResult:
        if not isinstance(value, int) or value < 0:
            return ValidationResult.failure(
                "max_decimal_places must be a non-negative integer", "max_decimal_places"
            )
        return ValidationResult.success()


# =============================================================================
# WORKLOAD VALIDATORS
# =============================================================================

class WorkloadValidator:
    """Validator for processes, threads and strategy parameters."""

    @classmethod
    def validate_processes(cls, processes: List[Any],
                           max_decimal_places: int = DEFAULT_MAX_DECIMAL_PLACES) -> ValidationResult:
        """
        Validate a flat workload of Process objects.

        Checks: non-empty, unique ids, arrival >= 0, burst > 0, finite values.
        """
        result = ValidationResult.success()
        if not processes:
            result.add_error("workload must contain at least one process")
            return result

        seen = set()
        for process in processes:
            if process.pid in seen:
                result.add_error(f"duplicate process id '{process.pid}'")
            seen.add(process.pid)
            result.merge(cls.validate_timing(
                process.pid, process.arrival_time, process.burst_time, max_decimal_places
            ))
        return result

    @classmethod
    def validate_process_threads(cls, groups: List[Any],
                                 max_decimal_places: int = DEFAULT_MAX_DECIMAL_PLACES) -> ValidationResult:
        """
        Validate a hierarchical workload of ProcessThreads.

        Every process needs at least one thread; thread ids are unique
        within their process.
        """
        result = ValidationResult.success()
        if not groups:
            result.add_error("workload must contain at least one process")
            return result

        seen_pids = set()
        for group in groups:
            if group.pid in seen_pids:
                result.add_error(f"duplicate process id '{group.pid}'")
            seen_pids.add(group.pid)

            if not group.threads:
                result.add_error(f"process '{group.pid}' has no threads")
                continue

            seen_tids = set()
            for thread in group.threads:
                if thread.tid in seen_tids:
                    result.add_error(f"duplicate thread id '{thread.tid}' in process '{group.pid}'")
                seen_tids.add(thread.tid)
                result.merge(cls.validate_timing(
                    group.thread_key(thread.tid), thread.arrival_time, thread.burst_time,
                    max_decimal_places
                ))
        return result

    @classmethod
    def validate_timing(cls, entity_id: str, arrival: float, burst: float,
                        max_decimal_places: int = DEFAULT_MAX_DECIMAL_PLACES) -> ValidationResult:
        """Validate arrival and burst of one entity."""
        result = ValidationResult.success()
        if not _is_number(arrival) or not math.isfinite(arrival):
            result.add_error(f"{entity_id}: arrival must be a finite number")
        elif arrival < 0:
            result.add_error(f"{entity_id}: arrival cannot be negative, got {arrival}")

        if not _is_number(burst) or not math.isfinite(burst):
            result.add_error(f"{entity_id}: burst must be a finite number")
        elif burst <= 0:
            result.add_error(f"{entity_id}: burst must be positive, got {burst}")

        if result.is_valid and _exceeds_precision((arrival, burst), max_decimal_places):
            result.add_warning(
                f"{entity_id}: values are rounded to {max_decimal_places} decimal places"
            )
        return result

    @classmethod
    def validate_strategy(cls, algorithm: SchedulingAlgorithm,
                          quantum: Optional[float]) -> ValidationResult:
        """Round Robin needs a positive quantum; other strategies ignore it."""
        if not algorithm.requires_quantum:
            return ValidationResult.success()
        if quantum is None:
            return ValidationResult.failure(
                f"{algorithm.value} requires a time quantum", "quantum"
            )
        return ConfigValidator.validate_quantum(quantum, "quantum")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _exceeds_precision(values: Iterable[float], places: int) -> bool:
    return any(count_decimals(v) > places for v in values)


# =============================================================================
# GUARD FUNCTIONS
# =============================================================================

def require_positive(value: Union[int, float], name: str) -> Union[int, float]:
    """Guard that requires a positive number."""
    if not _is_number(value) or value <= 0:
        raise ValidationError(f"{name} must be positive", name, value)
    return value


def require_non_negative(value: Union[int, float], name: str) -> Union[int, float]:
    """Guard that requires a non-negative number."""
    if not _is_number(value) or value < 0:
        raise ValidationError(f"{name} must be non-negative", name, value)
    return value


# =============================================================================
# SAFE OPERATION WRAPPERS
# =============================================================================

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers.

    Args:
        numerator: Dividend
        denominator: Divisor
        default: Value to return if division fails

    Returns:
        Result of division or default
    """
    try:
        if denominator == 0:
            return default
        return numerator / denominator
    except (TypeError, ZeroDivisionError):
        return default


# =============================================================================
# LOGGING UTILITIES
# =============================================================================

def log_validation_result(result: ValidationResult, context: str = ""):
    """Log validation result with appropriate level."""
    prefix = f"[{context}] " if context else ""

    if result.is_valid:
        for warning in result.warnings:
            logger.warning(f"{prefix}{warning}")
        logger.debug(f"{prefix}Validation passed")
    else:
        for error in result.errors:
            logger.error(f"{prefix}Validation error: {error}")
        for warning in result.warnings:
            logger.warning(f"{prefix}Validation warning: {warning}")
