# closest_param_benchmark.py
# Run with: python closest_param_benchmark.py

import timeit

import numpy as np

from cubicpath.path import CubicBezierPath

rng = np.random.default_rng(42)

KNOT_COUNTS = [2, 5, 10, 20, 50]
THRESHOLDS = [1e-3, 1e-6, 1e-9]
REPEATS = 20


def main():
    for num_knots in KNOT_COUNTS:
        knots = rng.uniform(-10.0, 10.0, size=(num_knots, 3))
        path = CubicBezierPath(knots)
        pos = rng.uniform(-10.0, 10.0, size=3)
        for threshold in THRESHOLDS:
            elapsed = timeit.timeit(
                lambda: path.closest_param(pos, threshold), number=REPEATS  # pylint: disable=cell-var-from-loop
            )
            print(f"knots={num_knots:3d}  threshold={threshold:.0e}  {elapsed / REPEATS * 1e3:8.3f} ms/query")


if __name__ == "__main__":
    main()
