"""
Pipeline event logging (one JSON object per line).

Complements the detailed per-session loguru logs with a compact, append-only
record of every tailoring request: when it started, which backend rendered it,
and how it failed. Disabled when PIPELINE_EVENTS_FILE is unset.

Usage:
    from tailor.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        event_type="render_completed",
        request_id="20261018_093015",
        source="rendering",
        backend="latexonline",
        size_bytes=48213,
    )
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from tailor.utils.timestamp import now_exact

load_dotenv()
_events_file_env = os.getenv("PIPELINE_EVENTS_FILE")
PIPELINE_EVENTS_FILE = Path(_events_file_env) if _events_file_env else None


def log_pipeline_event(
    event_type: str,
    request_id: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Append an event to the pipeline event log.

    Args:
        event_type: Type of event (e.g., "tailor_started", "generation_failed")
        request_id: Identifier of the tailoring request
        source: Event source (e.g., "pipeline", "generation", "rendering", "cli")
        events_file: Override for PIPELINE_EVENTS_FILE
        **extra_fields: Additional event-specific fields (must be JSON-serializable)
    """
    events_file = events_file or PIPELINE_EVENTS_FILE
    if events_file is None:
        return

    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "request_id": request_id,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    n: int = 10,
    event_type: Optional[str] = None,
    request_id: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        event_type: Filter to only events of this type (optional)
        request_id: Filter to only events of this request (optional)
        events_file: Override for PIPELINE_EVENTS_FILE

    Returns:
        List of event dicts (most recent last)
    """
    events_file = events_file or PIPELINE_EVENTS_FILE
    if events_file is None or not Path(events_file).exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    if request_id:
        events = [e for e in events if e.get("request_id") == request_id]

    return events[-n:] if len(events) > n else events
