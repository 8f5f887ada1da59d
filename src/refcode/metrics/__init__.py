"""Prometheus metrics for refcode."""

from __future__ import annotations

from prometheus_client import Counter

# Codes rendered, by operation (generate, from_sequence, increment)
CODES_ISSUED = Counter("refcode_codes_issued_total", "Total codes issued", ["mode"])

# Sequence restarts at 1 (date_change, overflow)
SEQUENCE_RESETS = Counter("refcode_sequence_resets_total", "Sequence resets", ["reason"])

# Width ratchet events
WIDTH_GROWTH = Counter("refcode_width_growth_total", "Sequence width growth events")

# Codes that failed validation during increment/parse
REJECTED_CODES = Counter("refcode_rejected_codes_total", "Rejected codes", ["operation"])

__all__ = [
    "CODES_ISSUED",
    "SEQUENCE_RESETS",
    "WIDTH_GROWTH",
    "REJECTED_CODES",
]
