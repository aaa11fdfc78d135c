"""
Pydantic models for pipeline descriptions and benchmark configuration/results.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from datetime import datetime
from enum import Enum


class StepType(str, Enum):
    """Pipeline stages that can be described declaratively"""
    MAP = "map"
    FILTER = "filter"
    REMOVE = "remove"
    TAKE = "take"
    TAKE_WHILE = "take_while"
    TAKE_NTH = "take_nth"
    DROP = "drop"
    DROP_WHILE = "drop_while"
    CHUNK = "chunk"
    DEDUPE = "dedupe"
    DISTINCT = "distinct"
    FLATTEN = "flatten"
    COMPACT = "compact"
    INTERPOSE = "interpose"
    CYCLE = "cycle"


FUNCTION_STEPS = {StepType.MAP, StepType.FILTER, StepType.REMOVE, StepType.TAKE_WHILE, StepType.DROP_WHILE}
COUNT_STEPS = {StepType.TAKE, StepType.TAKE_NTH, StepType.DROP}


class Engine(str, Enum):
    """Implementations compared by the benchmark"""
    LIST = "list"
    SEQUENCE = "sequence"
    VECTOR = "vector"


class Scenario(str, Enum):
    """Benchmark workloads"""
    SIMPLE = "simple"    # filter, map, reduce
    LONGER = "longer"    # filter, map, filter, map, map, filter, reduce


class PipelineStep(BaseModel):
    """One stage of a declarative pipeline"""
    type: StepType = Field(..., description="Stage kind")
    function: Optional[str] = Field(
        None,
        description="Name of a registered function (map/filter/remove/take_while/drop_while)"
    )
    count: Optional[int] = Field(
        None,
        description="Element count for take/take_nth/drop",
        ge=0
    )
    size: Optional[int] = Field(
        None,
        description="Group size for chunk",
        ge=1
    )
    step: int = Field(1, description="Skip-ahead stride for chunk", ge=1)
    value: Any = Field(None, description="Separator for interpose")
    flag: bool = Field(
        False,
        description="flatten_strings for flatten, void_only for compact"
    )

    @model_validator(mode='after')
    def validate_arguments(self):
        """Each stage kind needs its own argument"""
        if self.type in FUNCTION_STEPS and not self.function:
            raise ValueError(f"'{self.type.value}' step requires a function name")
        if self.type in COUNT_STEPS and self.count is None:
            raise ValueError(f"'{self.type.value}' step requires a count")
        if self.type == StepType.TAKE_NTH and self.count == 0:
            raise ValueError("'take_nth' count must be at least 1")
        if self.type == StepType.CHUNK and self.size is None:
            raise ValueError("'chunk' step requires a size")
        return self


class PipelineRequest(BaseModel):
    """A source plus the stages to apply to it"""
    source: List[Any] = Field(..., description="Source elements")
    steps: List[PipelineStep] = Field(default_factory=list, description="Stages, in order")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "source": [1, 2, 3, 4, 5, 6],
                "steps": [
                    {"type": "filter", "function": "is_even"},
                    {"type": "map", "function": "square"},
                    {"type": "take", "count": 2}
                ]
            }
        }
    )


class BenchmarkConfig(BaseModel):
    """Sizes, workloads and engines to measure"""
    sizes: List[int] = Field(
        default_factory=lambda: [10, 100, 1000, 10000],
        description="Input sizes (range(0, size))"
    )
    scenarios: List[Scenario] = Field(
        default_factory=lambda: [Scenario.SIMPLE, Scenario.LONGER],
        description="Workloads to run"
    )
    engines: List[Engine] = Field(
        default_factory=lambda: [Engine.LIST, Engine.SEQUENCE, Engine.VECTOR],
        description="Engines to compare"
    )
    repeats: int = Field(5, description="Timed runs per measurement", ge=1, le=1000)

    @field_validator('sizes')
    @classmethod
    def validate_sizes(cls, v):
        """Sizes must be non-empty and positive"""
        if not v:
            raise ValueError("At least one size is required")
        if any(size <= 0 for size in v):
            raise ValueError(f"Sizes must be positive: {v}")
        return v

    @field_validator('scenarios', 'engines')
    @classmethod
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError("At least one entry is required")
        return v


class BenchmarkMeasurement(BaseModel):
    """Timing for one engine on one workload and size"""
    scenario: Scenario
    engine: Engine
    size: int = Field(..., ge=1)
    mean_ms: float = Field(..., description="Mean run time in milliseconds", ge=0)
    min_ms: float = Field(..., description="Fastest run time in milliseconds", ge=0)
    repeats: int = Field(..., ge=1)
    result: Any = Field(None, description="Value the workload produced")


class BenchmarkReport(BaseModel):
    """All measurements of one benchmark run"""
    measurements: List[BenchmarkMeasurement] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def fastest(self) -> Dict[str, str]:
        """Fastest engine per "scenario/size" key"""
        best: Dict[str, BenchmarkMeasurement] = {}
        for m in self.measurements:
            key = f"{m.scenario.value}/{m.size}"
            if key not in best or m.mean_ms < best[key].mean_ms:
                best[key] = m
        return {key: m.engine.value for key, m in best.items()}

    def results_agree(self) -> bool:
        """Every engine produced the same value for each scenario/size"""
        seen: Dict[str, Any] = {}
        for m in self.measurements:
            key = f"{m.scenario.value}/{m.size}"
            if key in seen and seen[key] != m.result:
                return False
            seen.setdefault(key, m.result)
        return True
