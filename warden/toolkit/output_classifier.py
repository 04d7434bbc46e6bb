"""Module output_classifier: inline documentation for warden/toolkit/output_classifier.py."""
#
# PURPOSE:
# Parses the worker output grammar into typed records.
#
# KEY RESPONSIBILITIES:
# - Strip terminal escape sequences
# - Match the statistics pattern before the finding pattern
# - Fall through to raw text when a captured field does not convert
#
# INTEGRATION:
# - Used by: warden/engine/supervisor.py
# - Depends on: warden/engine/models.py
#

# warden/toolkit/output_classifier.py
# Classifies raw worker output lines into statistics updates, findings or raw text.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from warden.engine.models import Finding, Statistics

logger = logging.getLogger(__name__)

# CSI sequences (colors, cursor movement), OSC sequences (titles, hyperlinks)
# terminated by BEL or ST, and two-byte ESC sequences.
ANSI_RE = re.compile(
    r"\x1B(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1B]*(?:\x07|\x1B\\)?|[@-Z\\-_])"
)

# tasks=5 mem=120MB targets=10 attempts=50 done=25 (50.0%) errors=2 speed=12.5 reqs/s
STATS_RE = re.compile(
    r"tasks=(?P<tasks>\d+)\s+mem=(?P<memory>.+?)\s+targets=(?P<targets>\d+)\s+"
    r"attempts=(?P<attempts>\d+)\s+done=(?P<done>\d+)\s+\((?P<done_percent>[^)]*)%\)"
    r"(?:\s+errors=(?P<errors>\d+))?\s+speed=(?P<speed>\S+)\s+reqs/s"
)

# [2024-01-01T00:00:00] (ssh) <10.0.0.1:22> username=root password=toor
FINDING_RE = re.compile(
    r"\[(?P<found_at>[^\]]+)\]\s+\((?P<plugin>[^)]+)\)"
    r"(?:\s+<(?P<target>[^>]+)>)?\s+(?P<data>.+)"
)


@dataclass(frozen=True)
class RawLine:
    text: str


ClassifiedLine = Union[Statistics, Finding, RawLine]


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text or "")


def _parse_statistics(line: str) -> Optional[Statistics]:
    match = STATS_RE.search(line)
    if match is None:
        return None
    try:
        errors = match.group("errors")
        return Statistics(
            tasks=int(match.group("tasks")),
            memory=match.group("memory").strip(),
            targets=int(match.group("targets")),
            attempts=int(match.group("attempts")),
            errors=int(errors) if errors is not None else 0,
            done=int(match.group("done")),
            done_percent=float(match.group("done_percent")),
            reqs_per_sec=float(match.group("speed")),
        )
    except ValueError as exc:
        logger.debug(f"Statistics-like line did not parse ({exc}): {line!r}")
        return None


def _parse_finding(line: str) -> Optional[Finding]:
    match = FINDING_RE.search(line)
    if match is None:
        return None
    data = match.group("data").strip()
    if not data:
        return None
    return Finding(
        found_at=match.group("found_at"),
        plugin=match.group("plugin"),
        target=match.group("target"),
        data=data,
    )


def classify_line(line: str) -> Optional[ClassifiedLine]:
    """
    Classify one line of worker output.

    Escape sequences are stripped first. Blank lines yield None. Otherwise the
    first matching category wins: statistics, then finding, then raw text.
    A line whose fields fail to convert falls through to the next category,
    so this never raises on malformed input.
    """
    text = strip_ansi(line).strip()
    if not text:
        return None

    stats = _parse_statistics(text)
    if stats is not None:
        return stats

    finding = _parse_finding(text)
    if finding is not None:
        return finding

    return RawLine(text)


__all__ = [
    "ANSI_RE",
    "STATS_RE",
    "FINDING_RE",
    "RawLine",
    "ClassifiedLine",
    "strip_ansi",
    "classify_line",
]
