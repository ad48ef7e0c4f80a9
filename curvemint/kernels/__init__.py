"""
Kernel layer.

This package groups the deterministic math kernels used by the curve engine.
- `curvemint/kernels/python/` contains production Python kernels (human-readable)
  with explicit integer rounding, unit-tested against brute-force evaluation.
"""
