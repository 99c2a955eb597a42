"""Content complexity score.

    score = branch points + 0.1 * non-blank lines + 0.5 * max brace depth

Branch points are ``if``, ``else if``, ``for``, ``while``, ``case``,
``catch``, ternaries, ``&&`` and ``||``. The score is non-negative,
unbounded, and never decreases when whole lines are appended to
content that ends with a newline. Appending characters mid-line can
break a keyword match (``if`` becomes ``ifx``), so the guarantee is per
line, not per character.

Scores are rounded to hundredths. ``to_centi`` turns one into an integer
so totals can be summed exactly in any grouping.
"""

from __future__ import annotations

import re

_BRANCH_RE = re.compile(r"\b(?:if|for|while|case|catch)\b|\?(?![.?:])|&&|\|\|")

LINE_WEIGHT = 0.1
DEPTH_WEIGHT = 0.5


def branch_points(content: str) -> int:
    return len(_BRANCH_RE.findall(content))


def max_brace_depth(content: str) -> int:
    depth = 0
    deepest = 0
    for char in content:
        if char == "{":
            depth += 1
            if depth > deepest:
                deepest = depth
        elif char == "}" and depth > 0:
            depth -= 1
    return deepest


def non_blank_lines(content: str) -> int:
    return sum(1 for line in content.splitlines() if line.strip())


def complexity_score(content: str) -> float:
    """Score a file's content; identical content always scores the same."""
    score = (
        branch_points(content)
        + LINE_WEIGHT * non_blank_lines(content)
        + DEPTH_WEIGHT * max_brace_depth(content)
    )
    return round(score, 2)


def to_centi(score: float) -> int:
    """Score as integer hundredths."""
    return int(round(score * 100))
