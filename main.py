from time import sleep, perf_counter

from models import BenchmarkConfig
from sequence import Reduced, Sequence
from utils import render_results, run_benchmark, setup_logging
from vector import Vector

setup_logging()


def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.05)
    return x * x


print("\n--- Demo: laziness (no work until consumed) ---")
pipeline = (
    Sequence.range(1)              # infinite source
    .map(expensive_transform)
    .filter(lambda v: v % 2 == 0)
    .drop(3)
    .take(5)
)
print("Constructed pipeline over an infinite range. Nothing computed yet.")
t0 = perf_counter()
out = pipeline.to_list()
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.2f}s\n")

print("--- Demo: repeatability (same pipeline, second traversal) ---")
print(f"Second pass: {pipeline.to_list()}\n")

print("--- Demo: early exit with Reduced ---")
total = Sequence.range().fold(lambda acc, x: Reduced(acc) if acc > 5 else acc + x)
print(f"fold over an infinite range stopped at: {total}\n")

print("--- Demo: grouping combinators ---")
print("chunk(3):", render_results(Sequence.range().take(7).chunk(3)))
print("partition_by:", render_results(
    Sequence.of_items(1, 1, 2, 2).cycle().partition_by(lambda x: x % 2).take(3)
))
print("interleave:", Sequence.of([0, 2, 4]).interleave([1, 3]).to_list())
print("interpose:", Sequence.of_items("a", "b", "c").interpose("-").to_string())
print()

print("--- Demo: Vector (shared, mutable, early-exit take) ---")
vec = Vector.of(1, 2, 3, 4).filter(lambda x: x % 2 == 0).concat([5, 6, 7, 8])
alias = vec
alias.filter(lambda x: x % 2 == 0)
print(f"take(3): {vec.take(3).to_list()} (alias changes are visible: {alias is vec})\n")

print("--- Demo: benchmark ---")
report = run_benchmark(BenchmarkConfig(sizes=[10, 1000, 10000], repeats=3))
for measurement in report.measurements:
    print(
        f"  {measurement.scenario.value:<7} {measurement.engine.value:<9} "
        f"size={measurement.size:<6} mean={measurement.mean_ms:.3f}ms"
    )
print(f"Fastest: {report.fastest()}")
