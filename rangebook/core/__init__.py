"""Core mathematics and configuration for the Rangebook pricing engine.

This package contains pure building blocks:

- ``catalog``  — static asset and timeframe registries
- ``config``   — market policy constants (limits, edge, treasury, caps)
- ``pricing``  — volatility scaling, tanh-CDF win probability, payout odds,
  range-width validation
- ``domain``   — immutable Leg / Ticket records and structured rejections

Nothing in this package imports from ``rangebook.services`` or performs I/O.
All modules are side-effect-free and unit-testable in isolation.
"""
