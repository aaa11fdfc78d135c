"""
Helpers around the lazy sequence engines: logging setup, performance
measurement, declarative pipeline building, the benchmark harness and
result rendering.
"""

import functools
import gc
import json
import logging
import os
import sys
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from models import (
    BenchmarkConfig,
    BenchmarkMeasurement,
    BenchmarkReport,
    Engine,
    PipelineRequest,
    PipelineStep,
    Scenario,
    StepType,
)
from sequence import Sequence
from vector import Vector

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure root logging; the level defaults to $LAZYSEQ_LOG_LEVEL or INFO"""
    level = (level or os.environ.get("LAZYSEQ_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('lazyseq')


# ---------- Performance Metrics ----------

_performance_metrics = {
    "operations": [],
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def _record(performance_info: Dict[str, Any]) -> None:
    # the result payload is returned to the caller, never retained here
    entry = {key: value for key, value in performance_info.items() if key != "result"}
    _performance_metrics["operations"].append(entry)
    _performance_metrics["total_time_ms"] += performance_info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += performance_info["memory_usage_mb"]
    _performance_metrics["operation_count"] += 1


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Measure time and peak traced memory of a function call"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()

        performance_info = {
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": True,
            "result": result,
            "result_size": len(result) if hasattr(result, "__len__") else None,
            "timestamp": time.time()
        }
        _record(performance_info)
        return performance_info

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()

        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        logger.error(f"Operation '{operation_name}' failed after {execution_time_ms:.3f}ms: {e}")
        raise

    finally:
        tracemalloc.stop()


def get_performance_summary() -> Dict[str, Any]:
    """Summary of all recorded measurements"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return {
            "total_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": count,
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count,
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / count
    }


def clear_performance_metrics():
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }


# ---------- Declarative Pipelines ----------

FUNCTIONS: Dict[str, Callable] = {
    "identity": lambda x: x,
    "double": lambda x: x * 2,
    "square": lambda x: x * x,
    "increment": lambda x: x + 1,
    "negate": lambda x: -x,
    "to_str": str,
    "is_even": lambda x: x % 2 == 0,
    "is_odd": lambda x: x % 2 == 1,
    "is_positive": lambda x: x > 0,
    "is_truthy": bool,
}


def _resolve(name: str) -> Callable:
    try:
        return FUNCTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown function: {name}. Valid functions: {sorted(FUNCTIONS)}") from None


def apply_step(seq: Sequence, step: PipelineStep) -> Sequence:
    """Return ``seq`` extended by one declarative stage"""
    kind = step.type
    if kind == StepType.MAP:
        return seq.map(_resolve(step.function))
    elif kind == StepType.FILTER:
        return seq.filter(_resolve(step.function))
    elif kind == StepType.REMOVE:
        return seq.remove(_resolve(step.function))
    elif kind == StepType.TAKE_WHILE:
        return seq.take_while(_resolve(step.function))
    elif kind == StepType.DROP_WHILE:
        return seq.drop_while(_resolve(step.function))
    elif kind == StepType.TAKE:
        return seq.take(step.count)
    elif kind == StepType.TAKE_NTH:
        return seq.take_nth(step.count)
    elif kind == StepType.DROP:
        return seq.drop(step.count)
    elif kind == StepType.CHUNK:
        return seq.chunk(step.size, step.step)
    elif kind == StepType.DEDUPE:
        return seq.dedupe()
    elif kind == StepType.DISTINCT:
        return seq.distinct()
    elif kind == StepType.FLATTEN:
        return seq.flatten(step.flag)
    elif kind == StepType.COMPACT:
        return seq.compact(step.flag)
    elif kind == StepType.INTERPOSE:
        return seq.interpose(step.value)
    elif kind == StepType.CYCLE:
        return seq.cycle()
    raise ValueError(f"Unknown op: {kind}")


def build_pipeline(request: PipelineRequest) -> Sequence:
    """Turn a PipelineRequest into a (not yet consumed) Sequence"""
    return functools.reduce(apply_step, request.steps, Sequence.of(request.source))


def materialize(value: Any) -> Any:
    """Recursively turn Sequences and Vectors into plain lists"""
    if isinstance(value, (Sequence, Vector)):
        return [materialize(x) for x in value]
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {key: materialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [materialize(x) for x in value]
    return value


def process_lazy_operations(request: PipelineRequest) -> Dict[str, Any]:
    """
    Build and run a declarative pipeline, reporting time and peak memory.

    The pipeline must end up finite: a ``cycle`` step needs a later ``take``.
    """
    operations_applied = [step.type.value for step in request.steps]
    pipeline = build_pipeline(request)
    performance = measure_performance("lazy_chain", lambda: materialize(pipeline))
    result = performance["result"]

    return {
        "result": result,
        "operations_applied": operations_applied,
        "performance": {
            "processing_time_ms": performance["execution_time_ms"],
            "memory_usage_mb": performance["memory_usage_mb"],
            "input_size": len(request.source),
            "output_size": len(result),
            "operation": "lazy_chain"
        }
    }


# ---------- Benchmark Harness ----------

def _add(acc, x):
    return acc + x


def _simple_list(size):
    items = [x * 2 for x in range(size) if x % 5 == 0]
    return functools.reduce(_add, items)


def _simple_sequence(size):
    return (
        Sequence.range(0, size)
        .filter(lambda x: x % 5 == 0)
        .map(lambda x: x * 2)
        .reduce(_add)
    )


def _simple_vector(size):
    vec = (
        Vector(range(size))
        .filter(lambda x: x % 5 == 0)
        .map(lambda x: x * 2)
    )
    return functools.reduce(_add, vec.to_list())


def _longer_list(size):
    items = [x for x in range(size) if x % 3 == 0]
    items = [x * 2 for x in items]
    items = [x for x in items if x % 2 == 0]
    items = [x + 1 for x in items]
    items = [x * x for x in items]
    items = [x for x in items if x % 2 == 1]
    return functools.reduce(_add, items)


def _longer_sequence(size):
    return (
        Sequence.range(0, size)
        .filter(lambda x: x % 3 == 0)
        .map(lambda x: x * 2)
        .filter(lambda x: x % 2 == 0)
        .map(lambda x: x + 1)
        .map(lambda x: x * x)
        .filter(lambda x: x % 2 == 1)
        .reduce(_add)
    )


def _longer_vector(size):
    vec = (
        Vector(range(size))
        .filter(lambda x: x % 3 == 0)
        .map(lambda x: x * 2)
        .filter(lambda x: x % 2 == 0)
        .map(lambda x: x + 1)
        .map(lambda x: x * x)
        .filter(lambda x: x % 2 == 1)
    )
    return functools.reduce(_add, vec.to_list())


WORKLOADS: Dict[Scenario, Dict[Engine, Callable[[int], Any]]] = {
    Scenario.SIMPLE: {
        Engine.LIST: _simple_list,
        Engine.SEQUENCE: _simple_sequence,
        Engine.VECTOR: _simple_vector,
    },
    Scenario.LONGER: {
        Engine.LIST: _longer_list,
        Engine.SEQUENCE: _longer_sequence,
        Engine.VECTOR: _longer_vector,
    },
}


def time_workload(workload: Callable[[int], Any], size: int, repeats: int) -> Dict[str, Any]:
    """Run ``workload(size)`` ``repeats`` times and collect timings in milliseconds"""
    timings: List[float] = []
    result = None
    for _ in range(repeats):
        start = time.perf_counter()
        result = workload(size)
        timings.append((time.perf_counter() - start) * 1000)
    return {
        "mean_ms": sum(timings) / len(timings),
        "min_ms": min(timings),
        "result": result
    }


def run_benchmark(config: BenchmarkConfig = None) -> BenchmarkReport:
    """Time every configured engine on every scenario and size"""
    config = config or BenchmarkConfig()
    report = BenchmarkReport()

    for scenario in config.scenarios:
        for size in config.sizes:
            for engine in config.engines:
                timing = time_workload(WORKLOADS[scenario][engine], size, config.repeats)
                report.measurements.append(BenchmarkMeasurement(
                    scenario=scenario,
                    engine=engine,
                    size=size,
                    repeats=config.repeats,
                    **timing
                ))
            logger.info(f"Benchmarked '{scenario.value}' at size {size} ({len(config.engines)} engines)")

    if not report.results_agree():
        logger.warning("Engines disagree on benchmark results")
    return report


# ---------- Rendering ----------

HTML_TEMPLATE = """
    <style>
    html, *{{
      font-family: "Fira Code", "Fira Code Retina", "Droid Sans Mono", Mono, Monospace;
    }}
    </style>

    <h1>Results</h1>
    <div>
      <pre>{body}</pre>
    </div>
"""


def render_results(value: Any) -> str:
    """Pretty JSON for an already-materialized (or materializable) result"""
    return json.dumps(materialize(value), indent=2, default=str)


def render_html(value: Any) -> str:
    """Minimal HTML page showing ``render_results(value)``"""
    body = render_results(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return HTML_TEMPLATE.format(body=body)
