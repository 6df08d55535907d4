"""Post-processing for model output: cleanup, truncation and JSON extraction."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from elphub.prompts.templates import TRUNCATION_MARKER

logger = logging.getLogger(__name__)

_LOWER = "a-záéíóúàèìòùâêîôûãõçñ"
_UPPER = "A-ZÁÉÍÓÚÀÈÌÒÙÂÊÎÔÛÃÕÇÑ"

_TRANSLATION_PREFIXES = [
    re.compile(r"^(Translation|Translated text|Here is the translation|Tradução|Texto traduzido)[:\s]*", re.I),
    re.compile(r"^(Traducción|Texto traducido|Traduzione|Testo tradotto|翻译|OUTPUT)[:\s]*", re.I),
    re.compile(r'^["\'`]+'),
    re.compile(r'^"""\s*'),
]

_MERGED_WORDS = re.compile(rf"([{_LOWER}])([{_UPPER}])")
# Only before a capital, so URLs and decimal numbers survive.
_MISSING_SPACE_AFTER_PUNCT = re.compile(rf"([.:;!?])([{_UPPER}])")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)


def truncate(text: str, limit: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut ``text`` to ``limit`` characters, appending ``marker`` when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def clean_translation(text: str) -> str:
    """Strip chatty prefixes and quoting from a translation, keep line structure."""
    cleaned = text.strip()
    for prefix in _TRANSLATION_PREFIXES:
        cleaned = prefix.sub("", cleaned)
    cleaned = re.sub(r'"""\s*$', "", cleaned)
    cleaned = re.sub(r'["\'`]+$', "", cleaned).strip()

    cleaned = cleaned.replace("\r\n", "\n").replace("\t", " ")
    cleaned = _MERGED_WORDS.sub(r"\1 \2", cleaned)
    cleaned = _MISSING_SPACE_AFTER_PUNCT.sub(r"\1 \2", cleaned)
    cleaned = re.sub(r" +", " ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def clamp_expansion(translated: str, original: str) -> str:
    """Undo runaway output on short inputs.

    When an input under 200 chars comes back more than three times longer,
    keep only the first line, provided it is at least half the original length.
    """
    original_len = len(original)
    if len(translated) > original_len * 3 and original_len < 200:
        first_line = translated.split("\n")[0]
        if first_line and len(first_line) >= original_len * 0.5:
            return first_line.strip()
    return translated


def extract_json_array(text: str) -> list[Any] | None:
    match = re.search(r"\[[\s\S]*\]", text)
    if not match:
        return None
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("Bracketed text was not valid JSON")
        return None
    return value if isinstance(value, list) else None


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Parse a JSON object from model output, tolerating code fences."""
    candidate = _CODE_FENCE.sub("", text.strip())
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", candidate)
        if not match:
            return None
        try:
            value = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
    return value if isinstance(value, dict) else None
