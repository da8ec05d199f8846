from __future__ import annotations

import re
from dataclasses import dataclass

# Empirically tuned against silent and near-silent recordings.
SMALL_AUDIO_BYTES = 100 * 1024
SMALL_AUDIO_MAX_CHARS = 150
MIN_BYTES_PER_CHAR = 50
BYTES_PER_CHAR_MIN_CHARS = 100
MIN_REPEAT_CHARS = 15
MIN_REPEATS = 3
# Bounds on the repeating unit.
MAX_UNIT_CHARS = 120
MIN_UNIT_WORDS = 2
MAX_UNIT_WORDS = 12

_REPEATED_SUBSTRING = re.compile(
    r"(.{%d,%d}?)\1{%d,}" % (MIN_REPEAT_CHARS, MAX_UNIT_CHARS, MIN_REPEATS - 1), re.DOTALL
)


@dataclass(frozen=True)
class FilteredTranscript:
    text: str
    confidence: float
    reason: str | None = None

    @property
    def rejected(self) -> bool:
        return self.reason is not None


def _has_repeated_word_run(transcript: str) -> bool:
    """Look for MIN_REPEATS back-to-back copies of a multi-word phrase.

    ``streak`` counts consecutive positions where a word equals the word
    ``size`` places later; ``size * (MIN_REPEATS - 1)`` of them in a row means
    the phrase starting at the beginning of the streak repeats MIN_REPEATS times.
    Single-word stutters ("hello hello hello") are ordinary speech and pass.
    """
    words = transcript.split()
    for size in range(MIN_UNIT_WORDS, MAX_UNIT_WORDS + 1):
        needed = size * (MIN_REPEATS - 1)
        streak = 0
        for idx in range(len(words) - size):
            if words[idx] != words[idx + size]:
                streak = 0
                continue
            streak += 1
            if streak >= needed:
                start = idx - needed + 1
                if len(" ".join(words[start : start + size * MIN_REPEATS])) >= MIN_REPEAT_CHARS:
                    return True
    return False


def repetition_detected(transcript: str) -> bool:
    if _REPEATED_SUBSTRING.search(transcript):
        return True
    return _has_repeated_word_run(transcript)


def filter_transcript(transcript: str, audio_byte_length: int, *, confidence: float = 1.0) -> FilteredTranscript:
    """Null out speech-to-text output that was likely invented from silence.

    The checks are independent; any one of them rejects the transcript.
    """
    length = len(transcript)

    if audio_byte_length < SMALL_AUDIO_BYTES and length > SMALL_AUDIO_MAX_CHARS:
        return FilteredTranscript(text="", confidence=0.0, reason="short_audio_long_text")
    if audio_byte_length / max(length, 1) < MIN_BYTES_PER_CHAR and length > BYTES_PER_CHAR_MIN_CHARS:
        return FilteredTranscript(text="", confidence=0.0, reason="low_bytes_per_char")
    if repetition_detected(transcript):
        return FilteredTranscript(text="", confidence=0.0, reason="repeated_segment")

    return FilteredTranscript(text=transcript, confidence=confidence)
