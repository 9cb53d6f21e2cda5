from time import sleep
import random

import lazy
from models import LoggingConfig
from utils import (
    counted,
    get_performance_summary,
    measure_evaluation,
    setup_logging,
)

setup_logging(LoggingConfig(level="INFO"))


def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.05)
    return x * x


print("\n--- Demo: laziness (no work until each) ---")
pipeline = (
    lazy.range(0, 1_000_000)
    .map(expensive_transform)
    .filter(lambda v: v % 2 == 0)
    .take(5)
)
print("Constructed pipeline. No output yet (nothing computed).")
print("\nForcing (should compute only what's needed for 5 items):")
pipeline.each(lambda v: print(f"  -> {v}"))

print("\n--- Demo: generators are bounded downstream ---")
rolls = lazy.from_generator(lambda: random.randint(1, 6)).take_while(lambda r: r != 6)
rolls.each(lambda r: print(f"  rolled {r}"))
print("  rolled a 6, stopped")

print("\n--- Demo: take never over-pulls ---")
source, counter = counted(lazy.range(0, 100))
source.filter(lambda v: v % 3 == 0).take(4).each(lambda v: None)
print(f"  source pulled {counter.pulls} time(s) for 4 multiples of 3")

print("\n--- Demo: custom step and stop predicate ---")
lazy.range(1, lambda p: p > 1000, lambda p: p * 2).each(lambda v: print(f"  {v}"))

print("\n--- Demo: measured evaluation ---")
metrics = measure_evaluation(
    "squares_below_10k",
    lazy.range(0, 100_000).map(lambda x: x * x).take_while(lambda v: v < 10_000),
)
print(f"  delivered {metrics.values_delivered} values in {metrics.execution_time_ms:.2f} ms, "
      f"peak {metrics.memory_usage_mb:.4f} MB traced")
print(f"  summary: {get_performance_summary().model_dump(exclude={'operations'})}")
