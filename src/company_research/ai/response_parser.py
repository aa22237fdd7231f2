"""Utilities for parsing AI responses.

The provider is asked to answer with one ``Field Name, Value`` pair per line.
Model output is only loosely CSV, so parsing is deliberately permissive:
anything that does not look like a pair is skipped, never rejected.
"""

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def split_field_line(line: str) -> Optional[tuple]:
    """Split one reply line on its first comma.

    Args:
        line: A single line of the provider reply

    Returns:
        (key, value) stripped of surrounding whitespace, or None when the
        line has no comma or an empty key.
    """
    comma = line.find(",")
    if comma == -1:
        return None

    key = line[:comma].strip()
    if not key:
        return None

    return key, line[comma + 1 :].strip()


def parse_field_lines(response: Optional[str]) -> Dict[str, str]:
    """Parse a CSV-like AI reply into a field name to value mapping.

    Only the first comma splits a line, so values keep any internal commas
    ("Revenue, $1.2B, estimated" -> {"Revenue": "$1.2B, estimated"}).
    When a key repeats, the last value wins.

    Args:
        response: Raw AI response text

    Returns:
        Mapping of field name to value; empty for empty or unparseable input
    """
    if not response:
        return {}

    results: Dict[str, str] = {}
    skipped = 0

    for line in response.splitlines():
        pair = split_field_line(line)
        if pair is None:
            if line.strip():
                skipped += 1
            continue

        key, value = pair
        results[key] = value

    if skipped:
        logger.debug("Skipped %d non-field lines in AI response", skipped)

    return results
