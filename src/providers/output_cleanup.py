"""Post-processing for generated debate lines.

Provider output tends to echo the prompt, prefix the speaker label, leak
"my name is ..." self references or open with filler. Everything here is a
pure string transform so the same stage can run over provider output and
canned lines alike.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

_THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_QUOTE_CHARS = "\"'“”‘’`"

# Generic rhetorical openers, matched at the start of the line only.
_OPENER_PATTERNS = [
    r"(?:that's|that is|what) an? (?:great|good|interesting|excellent) (?:point|question)[.!,]?",
    r"(?:great|good|interesting|excellent|fair) (?:point|question)[.!,]?",
    r"well,",
    r"so,",
    r"honestly,",
    r"i (?:think|believe|feel) that\b",
    r"as a debater,?",
]
_OPENER_RE = re.compile(r"^(?:" + "|".join(_OPENER_PATTERNS) + r")\s*", re.IGNORECASE)
_AI_DISCLAIMER_RE = re.compile(
    r"\bas an ai(?: language model)?,?\s*(?:i\b[^.!?]*?(?:but|however),?\s*)?",
    re.IGNORECASE,
)


def _name_patterns(name: str) -> list[re.Pattern]:
    escaped = re.escape(name)
    return [
        # "Alex:" / "Alex -" / "Alex (The Pragmatist):" speaker labels
        re.compile(rf"^\s*{escaped}\s*(?:\([^)]*\))?\s*[:—\-]\s*", re.IGNORECASE),
        re.compile(rf"\bmy name is {escaped}\b[,.!]?\s*", re.IGNORECASE),
        re.compile(rf"^\s*(?:i am|i'm) {escaped}\b[,.!]?\s*", re.IGNORECASE),
        re.compile(rf"^\s*as {escaped}(?:\s*\([^)]*\))?,\s*", re.IGNORECASE),
    ]


def strip_think_blocks(text: str) -> str:
    """Remove complete <think>...</think> blocks from text."""
    if not text:
        return ""
    return _THINK_BLOCK_RE.sub("", text)


def strip_echoed_prompt(text: str, prompt: Optional[str]) -> str:
    """Drop the prompt when a completion endpoint returns it verbatim."""
    if not text or not prompt:
        return text or ""
    stripped_prompt = prompt.strip()
    if stripped_prompt and text.lstrip().startswith(stripped_prompt):
        return text.lstrip()[len(stripped_prompt):]
    return text.replace(stripped_prompt, "") if stripped_prompt else text


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _clamp(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    cut = text[: max_chars - 1]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(",;:- ") + "…"


def clean_utterance(
    text: Optional[str],
    *,
    speaker_names: Iterable[str] = (),
    echoed_prompt: Optional[str] = None,
    max_chars: int = 280,
) -> str:
    """Normalize one generated line; returns "" when nothing usable is left."""
    if not text:
        return ""

    cleaned = strip_think_blocks(strip_echoed_prompt(text, echoed_prompt))
    cleaned = _first_line(cleaned)

    patterns: list[re.Pattern] = []
    for name in speaker_names:
        if name:
            patterns.extend(_name_patterns(name))

    # Labels and openers can be stacked ("Alex: Well, great point! ...")
    previous = None
    while previous != cleaned:
        previous = cleaned
        for pattern in patterns:
            cleaned = pattern.sub("", cleaned)
        cleaned = _AI_DISCLAIMER_RE.sub("", cleaned)
        cleaned = _OPENER_RE.sub("", cleaned)
        cleaned = cleaned.strip().strip(_QUOTE_CHARS).strip()

    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if cleaned and cleaned[0].islower():
        cleaned = cleaned[0].upper() + cleaned[1:]
    return _clamp(cleaned, max_chars)


def is_substantive(text: str, *, min_chars: int = 6, min_words: int = 2) -> bool:
    """True when a cleaned line is long enough to broadcast."""
    if not text:
        return False
    return len(text) >= min_chars and len(text.split()) >= min_words
