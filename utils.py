"""
Utility functions for lazy sequences

Logging setup, measurement of forced evaluations, declarative chain building
and pull-count instrumentation used by the demo and the test suite.
"""

import gc
import logging
import os
import sys
import time
import tracemalloc
from typing import Any, Callable, Iterable, List, Optional

import psutil

from iterators import BaseIterator
from lazy import LazySequence
from models import (
    EXHAUSTED,
    ChainStep,
    EvaluationMetrics,
    LoggingConfig,
    PerformanceSummary,
    StepKind,
)


ROOT_LOGGER = 'lazyseq'

logger = logging.getLogger('lazyseq.utils')

# Global performance tracking
_performance_metrics: List[EvaluationMetrics] = []


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure the lazyseq logger tree and return its root logger"""
    config = config or LoggingConfig()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(config.level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False

    return root


# ---------- Instrumentation ----------

class PullCounter(BaseIterator):
    """Pass-through iterator that counts pulls on the iterator it wraps"""

    def __init__(self, inner: BaseIterator):
        self._inner = inner
        self.pulls = 0
        self.delivered = 0

    def next(self):
        self.pulls += 1
        value = self._inner.next()
        if value is not EXHAUSTED:
            self.delivered += 1
        return value

    def clone(self):
        return PullCounter(self._inner.clone())


def counted(sequence: LazySequence):
    """Wrap the chain of ``sequence`` in a PullCounter.

    Returns the new sequence and the counter; ``sequence`` is consumed.
    """
    counter = PullCounter(sequence.release())
    return LazySequence(counter), counter


def _rss_mb() -> float:
    return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024


def measure_evaluation(operation_name: str, sequence: LazySequence,
                       consumer: Optional[Callable[[Any], Any]] = None) -> EvaluationMetrics:
    """Force ``sequence`` with ``each`` and record time and memory of the run"""

    delivered = 0

    def _consume(value):
        nonlocal delivered
        delivered += 1
        if consumer is not None:
            consumer(value)

    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        sequence.each(_consume)
        current, peak = tracemalloc.get_traced_memory()
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        current, peak = tracemalloc.get_traced_memory()
        metrics = EvaluationMetrics(
            operation=operation_name,
            success=False,
            values_delivered=delivered,
            execution_time_ms=execution_time_ms,
            memory_usage_mb=peak / 1024 / 1024,
            rss_mb=_rss_mb(),
            error=str(e),
        )
        _performance_metrics.append(metrics)
        logger.error(f"Evaluation '{operation_name}' failed after {delivered} value(s): {e}")
        raise
    finally:
        if not already_tracing:
            tracemalloc.stop()

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    metrics = EvaluationMetrics(
        operation=operation_name,
        success=True,
        values_delivered=delivered,
        execution_time_ms=execution_time_ms,
        memory_usage_mb=peak / 1024 / 1024,
        rss_mb=_rss_mb(),
    )
    _performance_metrics.append(metrics)
    logger.info(f"Evaluation '{operation_name}' delivered {delivered} value(s) in {execution_time_ms:.2f} ms")
    return metrics


def get_performance_summary() -> PerformanceSummary:
    """Get summary of all recorded evaluations"""
    if not _performance_metrics:
        return PerformanceSummary()

    total_time = sum(m.execution_time_ms for m in _performance_metrics)
    total_memory = sum(m.memory_usage_mb for m in _performance_metrics)
    count = len(_performance_metrics)
    return PerformanceSummary(
        total_operations=count,
        total_values=sum(m.values_delivered for m in _performance_metrics),
        total_time_ms=total_time,
        total_memory_mb=total_memory,
        avg_time_ms=total_time / count,
        avg_memory_mb=total_memory / count,
        failures=sum(1 for m in _performance_metrics if not m.success),
        operations=[m.model_dump() for m in _performance_metrics],
    )


def clear_performance_metrics():
    """Clear all recorded evaluations"""
    _performance_metrics.clear()


# ---------- Chains ----------

def build_chain(sequence: LazySequence, steps: Iterable[Any]) -> LazySequence:
    """Apply declarative steps to ``sequence`` without evaluating anything.

    ``steps`` holds ChainStep models or dicts that validate as one.
    """
    for raw in steps:
        step = raw if isinstance(raw, ChainStep) else ChainStep.model_validate(raw)
        if step.kind == StepKind.MAP:
            sequence = sequence.map(step.func)
        elif step.kind == StepKind.FILTER:
            sequence = sequence.filter(step.func)
        elif step.kind == StepKind.TAKE:
            sequence = sequence.take(step.count)
        elif step.kind == StepKind.TAKE_WHILE:
            sequence = sequence.take_while(step.func)
        logger.debug(f"Applied {step.kind.value} step")
    return sequence


def validate_lazy_evaluation(obj: Any) -> bool:
    """Check that ``obj`` is an unconsumed LazySequence over a BaseIterator"""
    if not isinstance(obj, LazySequence):
        return False
    if obj.consumed:
        return False
    return isinstance(obj.iterator, BaseIterator)
