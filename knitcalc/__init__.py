"""
knitcalc: pattern calculation engine for knitted and crocheted garments.

Turns gauge, body measurements, ease and construction choices into per-piece
stitch counts, row counts and shaping schedules.  Entry points:

- :class:`knitcalc.engine.engine.PatternCalculationEngine` for typed input
- :func:`knitcalc.api.calculate.calculate_pattern` for JSON-shaped payloads
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
