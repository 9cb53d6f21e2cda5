"""
Lazy Sequences - Models

End-of-sequence marker, iterator state enums and the pydantic models used for
logging configuration, declarative chains and evaluation metrics.
"""

from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum
import logging


class _Exhausted:
    """Singleton returned by ``next()`` once a sequence has no more values"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "EXHAUSTED"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Exhausted, ())


EXHAUSTED = _Exhausted()


class TakeWhileState(str, Enum):
    """Lifecycle of a take_while iterator; ENDED is terminal"""
    ACTIVE = "active"
    ENDED = "ended"


class StepKind(str, Enum):
    """Combinators that can be applied declaratively"""
    MAP = "map"
    FILTER = "filter"
    TAKE = "take"
    TAKE_WHILE = "take_while"


class LoggingConfig(BaseModel):
    """Logging configuration for the lazyseq logger tree"""
    level: str = Field(
        "INFO",
        description="Logging level name"
    )
    format: str = Field(
        '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
        description="Format string handed to logging.Formatter"
    )
    log_file: Optional[str] = Field(
        None,
        description="Optional file that also receives log records"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate the level is a known logging level name"""
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown logging level: {v}")
        return name


class ChainStep(BaseModel):
    """One combinator step of a declarative chain"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: StepKind = Field(..., description="Combinator to apply")
    func: Optional[Callable[..., Any]] = Field(
        None,
        description="Transform or predicate for map, filter and take_while"
    )
    count: Optional[int] = Field(
        None,
        description="Number of elements for take",
        ge=0
    )

    @model_validator(mode='after')
    def validate_arguments(self):
        """Function steps need a callable, take needs a count"""
        if self.kind == StepKind.TAKE:
            if self.count is None:
                raise ValueError("take step requires a count")
        elif self.func is None:
            raise ValueError(f"{self.kind.value} step requires a func")
        return self


class EvaluationMetrics(BaseModel):
    """Result of forcing one sequence with measure_evaluation"""
    operation: str = Field(..., description="Name given to the measured run")
    success: bool = Field(..., description="Whether the run finished without raising")
    values_delivered: int = Field(0, description="Values handed to the consumer", ge=0)
    execution_time_ms: float = Field(..., description="Wall time in milliseconds", ge=0)
    memory_usage_mb: float = Field(..., description="Peak traced allocation in megabytes", ge=0)
    rss_mb: float = Field(..., description="Resident set size after the run in megabytes", ge=0)
    error: Optional[str] = Field(None, description="Error message if the run raised")
    timestamp: datetime = Field(default_factory=datetime.now)


class PerformanceSummary(BaseModel):
    """Aggregate over all recorded evaluations"""
    total_operations: int = 0
    total_values: int = 0
    total_time_ms: float = 0.0
    total_memory_mb: float = 0.0
    avg_time_ms: float = 0.0
    avg_memory_mb: float = 0.0
    failures: int = 0
    operations: List[Dict[str, Any]] = Field(default_factory=list)
