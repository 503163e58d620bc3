"""
Utility functions module.

Time Semantics:
- Bar timestamps are fixed at generation and are authoritative for trades
- Wall-clock time is only used for session start times and the default
  series end time
- Everything is UTC in memory and ISO8601 on the wire
"""
