"""
Post-processing of accepted summaries: filler removal, passive to active,
quantifier compression and punctuation cleanup.
"""

from __future__ import annotations

import re

FILLER_PATTERNS = [
    re.compile(p, re.I)
    for p in (
        r"\baccording to (the )?reports?,?",
        r"\bthe article (states|mentions|says|reports)( that)?,?",
        r"\bit is important to note that\b",
        r"\bit should be noted that\b",
        r"\bas previously mentioned,?",
        r"\bfor example,?",
        r"\bfor instance,?",
        r"\bin conclusion,?",
        r"\bto summarize,?",
        r"\bin summary,?",
        r"\boverall,",
    )
]

ACTIVE_VOICE = [
    (re.compile(r"\bwas (created|developed|built|designed|implemented|established|completed|announced)\b", re.I), r"\1"),
    (re.compile(r"\bwere (developed|created|built|designed|implemented|awarded|given|presented)\b", re.I), r"\1"),
    (re.compile(r"\bis expected to\b", re.I), "will"),
    (re.compile(r"\bwill be able to\b", re.I), "can"),
    (re.compile(r"\bis being\b", re.I), "is"),
    (re.compile(r"\bare being\b", re.I), "are"),
]

# Only compressed next to a number, so ordinary prose keeps its words
QUANTIFIERS = [
    (re.compile(r"\bmore than(?=\s*[$\d])", re.I), ">"),
    (re.compile(r"\bless than(?=\s*[$\d])", re.I), "<"),
    (re.compile(r"\b(?:approximately|about)(?=\s*[$\d])", re.I), "~"),
    (re.compile(r"(\d)\s*percent\b", re.I), r"\1%"),
    (re.compile(r"(\d)\s*million\b", re.I), r"\1M"),
    (re.compile(r"(\d)\s*billion\b", re.I), r"\1B"),
    (re.compile(r"(\d)\s*thousand\b", re.I), r"\1K"),
]

CLEANUP = [
    (re.compile(r"\s+"), " "),
    (re.compile(r"\s+([,.;:!?])"), r"\1"),
    (re.compile(r"([,;:])(?=[^\s\d])"), r"\1 "),
    # A period followed by a digit is a decimal point
    (re.compile(r"\.(?=[^\s\d.])"), ". "),
    (re.compile(r"\.(\s*\.)+"), "."),
    (re.compile(r",(\s*,)+"), ","),
    (re.compile(r"^[\s,;:]+"), ""),
]

SENTENCE_START = re.compile(r"(^|[.!?]\s+)([a-z])")


def _tidy(text: str) -> str:
    for pattern, replacement in CLEANUP:
        text = pattern.sub(replacement, text)
    return SENTENCE_START.sub(lambda m: m.group(1) + m.group(2).upper(), text).strip()


def post_process_summary(summary: str, preserve_structure: bool = False) -> str:
    """
    Tighten an accepted summary.

    With ``preserve_structure`` each non-blank line is tidied on its own, so
    list-shaped summaries keep one item per line.
    """
    processed = summary
    for pattern in FILLER_PATTERNS:
        processed = pattern.sub("", processed)
    for pattern, replacement in ACTIVE_VOICE:
        processed = pattern.sub(replacement, processed)
    for pattern, replacement in QUANTIFIERS:
        processed = pattern.sub(replacement, processed)
    if not preserve_structure:
        return _tidy(processed)
    lines = (_tidy(line) for line in processed.splitlines())
    return "\n".join(line for line in lines if line)
