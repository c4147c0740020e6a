"""Language detection: a script-based default detector.

The updater accepts any detector; this one needs no model files and is
good enough for the CLI. Swap in a statistical detector for accuracy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Kana marks Japanese even when mixed with Han characters
_KANA_RE = re.compile(r"[぀-ヿ]")

# CJK unified ideographs
_HAN_RE = re.compile(r"[一-鿿㐀-䶿]")

_HANGUL_RE = re.compile(r"[가-힯ᄀ-ᇿ]")

_CYRILLIC_RE = re.compile(r"[Ѐ-ӿ]")

_GREEK_RE = re.compile(r"[Ͱ-Ͽ]")

_ARABIC_RE = re.compile(r"[؀-ۿ]")

_HEBREW_RE = re.compile(r"[֐-׿]")

_THAI_RE = re.compile(r"[฀-๿]")

# Indic scripts
_DEVANAGARI_RE = re.compile(r"[ऀ-ॿ]")
_BENGALI_RE = re.compile(r"[ঀ-৿]")
_TAMIL_RE = re.compile(r"[஀-௿]")
_TELUGU_RE = re.compile(r"[ఀ-౿]")

# Basic Latin plus Latin-1 and Extended-A/B letters
_LATIN_RE = re.compile(r"[A-Za-zÀ-ɏ]")

_SCRIPT_MAP: list[tuple[re.Pattern, str]] = [
    (_KANA_RE, "ja"),
    (_HAN_RE, "zh"),
    (_HANGUL_RE, "ko"),
    (_CYRILLIC_RE, "ru"),
    (_GREEK_RE, "el"),
    (_ARABIC_RE, "ar"),
    (_HEBREW_RE, "he"),
    (_THAI_RE, "th"),
    (_DEVANAGARI_RE, "hi"),
    (_BENGALI_RE, "bn"),
    (_TAMIL_RE, "ta"),
    (_TELUGU_RE, "te"),
    (_LATIN_RE, "en"),
]


@dataclass
class LanguageResult:
    """One candidate language for a piece of text."""

    tag: str            # BCP-47 language tag (e.g., "en", "zh")
    confidence: float   # Share of script characters, 0.0 to 1.0


def detect_languages(text: str) -> list[LanguageResult]:
    """Rank candidate languages for the text by script coverage.

    Japanese absorbs the Han characters when kana are present, since Han
    alone cannot tell Chinese from Japanese.

    Args:
        text: The input text to analyze.

    Returns:
        Candidates ordered most confident first; empty for text with no letters.
    """
    if not text or not text.strip():
        return []

    counts: dict[str, int] = {}
    for pattern, tag in _SCRIPT_MAP:
        count = len(pattern.findall(text))
        if count > 0:
            counts[tag] = count

    if "ja" in counts and "zh" in counts:
        counts["ja"] += counts.pop("zh")

    total = sum(counts.values())
    if total == 0:
        return []

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [LanguageResult(tag=tag, confidence=count / total) for tag, count in ranked]


def detect_language_tags(text: str) -> list[str]:
    """Detector function for the updater: text -> tags, most confident first."""
    return [result.tag for result in detect_languages(text)]
