"""Computation layer for habit scheduling, streaks and contribution grids.

Layer hierarchy (leaves first):
    dates -> schedule -> streaks / grid -> summary_service

streaks and grid both consume schedule and never call each other.

Services should:
- Be pure: same inputs, same outputs (summary_service only adds a cache)
- Take read-only snapshots (a Habit plus its CompletionRecords)
- Return frozen dataclasses, never references into caller data

Services should NOT:
- Query or write storage (callers supply the snapshot)
- Decide how results are rendered
"""
