"""
Shared utilities for resume-tailor.

Common functionality used across contexts:
- Logger setup with provenance
- Pipeline event log
- Scoped scratch files
- Timestamps
"""

from tailor.utils.scratch import scoped_file
from tailor.utils.timestamp import now, now_exact

__all__ = ["scoped_file", "now", "now_exact"]
