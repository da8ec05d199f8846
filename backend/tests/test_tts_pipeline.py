from __future__ import annotations

import asyncio
import random
import struct

import pytest

from sehat_speech import concat_wav, relay_in_order, segment, strip_markdown
from sehat_speech.segmenter import MIN_FRAGMENT_CHARS

_ALPHABET = "abcdefghij ABC अआइकखग தமிழ் ।.!?\n  "


def _normalize(text: str) -> str:
    return " ".join(text.split())


def _random_text(rng: random.Random, length: int) -> str:
    return "".join(rng.choice(_ALPHABET) for _ in range(length))


def _random_prose(rng: random.Random, words: int) -> str:
    vocabulary = ["बुखार", "है", "fever", "since", "कल", "से", "மருத்துவமனை", "pain", "and", "cough"]
    parts = []
    for _ in range(words):
        word = rng.choice(vocabulary)
        if rng.random() < 0.15:
            word += rng.choice([".", "!", "?", "।"])
        parts.append(word)
    return " ".join(parts)


def test_segment_splits_on_sentence_boundaries_including_danda():
    text = "मुझे तीन दिन से बुखार है। सिर में भी बहुत दर्द हो रहा है। What should I do about this?"
    chunks = segment(text, 480)
    assert chunks == [
        "मुझे तीन दिन से बुखार है।",
        "सिर में भी बहुत दर्द हो रहा है।",
        "What should I do about this?",
    ]


def test_segment_merges_short_fragments():
    chunks = segment("Okay. I have had a headache for two days now. Yes.", 480)
    assert chunks == ["Okay. I have had a headache for two days now. Yes."]
    assert all(len(chunk) >= MIN_FRAGMENT_CHARS for chunk in segment("Hi. " + "a" * 30 + ". " + "b" * 30 + "."))


def test_segment_hard_splits_long_sentences_at_spaces():
    sentence = " ".join(["word"] * 60)
    chunks = segment(sentence, 50)
    assert all(0 < len(chunk) <= 50 for chunk in chunks)
    assert " ".join(chunks) == sentence


def test_segment_hard_splits_without_spaces():
    chunks = segment("x" * 125, 50)
    assert chunks == ["x" * 50, "x" * 50, "x" * 25]


def test_segment_rejects_non_positive_max_len():
    with pytest.raises(ValueError):
        segment("hello", 0)


def test_segment_empty_input():
    assert segment("") == []
    assert segment("   \n  ") == []


@pytest.mark.parametrize("seed", range(20))
def test_segment_round_trip_for_prose(seed):
    rng = random.Random(seed)
    text = _random_prose(rng, rng.randint(0, 1500))
    max_len = rng.choice([30, 80, 480])
    chunks = segment(text, max_len)
    assert all(0 < len(chunk) <= max_len for chunk in chunks)
    assert _normalize(" ".join(chunks)) == _normalize(text)


@pytest.mark.parametrize("seed", range(20))
def test_segment_preserves_every_character_for_arbitrary_text(seed):
    rng = random.Random(1000 + seed)
    text = _random_text(rng, rng.randint(0, 10_000))
    max_len = rng.choice([1, 7, 50, 480])
    chunks = segment(text, max_len)
    assert all(0 < len(chunk) <= max_len for chunk in chunks)
    assert "".join("".join(chunks).split()) == "".join(text.split())


def test_strip_markdown():
    text = "## Advice\n**Drink** water\n- rest *well*\n1. see a doctor"
    assert strip_markdown(text) == "Advice\nDrink water\nrest well\nsee a doctor"


async def _collect(generator):
    return [event async for event in generator]


@pytest.mark.parametrize("seed", range(10))
def test_relay_emits_in_chunk_order_despite_latency(seed):
    rng = random.Random(seed)
    chunks = [f"chunk {i}" for i in range(rng.randint(1, 12))]
    delays = {chunk: rng.uniform(0, 0.02) for chunk in chunks}
    completion_order: list[str] = []

    async def synthesize(chunk: str) -> str:
        await asyncio.sleep(delays[chunk])
        completion_order.append(chunk)
        return f"audio:{chunk}"

    events = asyncio.run(_collect(relay_in_order(chunks, synthesize)))

    audio = [event for event in events if event["type"] == "audio"]
    assert [event["index"] for event in audio] == list(range(len(chunks)))
    assert [event["audio"] for event in audio] == [f"audio:{chunk}" for chunk in chunks]
    assert all(event["total"] == len(chunks) for event in audio)
    assert events[-1] == {"type": "done", "totalChunks": len(chunks)}
    assert sorted(completion_order) == sorted(chunks)


def test_relay_dispatches_concurrently():
    in_flight = 0
    peak = 0

    async def synthesize(chunk: str) -> str:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return "a"

    asyncio.run(_collect(relay_in_order(["a", "b", "c", "d"], synthesize)))
    assert peak == 4


def test_relay_skips_failed_chunks_and_counts_attempts():
    async def synthesize(chunk: str) -> str:
        if chunk == "bad":
            raise RuntimeError("upstream 500")
        if chunk == "empty":
            return ""
        return f"audio:{chunk}"

    events = asyncio.run(_collect(relay_in_order(["one", "bad", "empty", "four"], synthesize)))
    assert [(e["type"], e.get("index")) for e in events] == [("audio", 0), ("audio", 3), ("done", None)]
    assert events[-1]["totalChunks"] == 4


def test_relay_cancels_pending_synthesis_when_consumer_stops():
    cancelled: list[str] = []

    async def synthesize(chunk: str) -> str:
        try:
            await asyncio.sleep(0 if chunk == "first" else 10)
        except asyncio.CancelledError:
            cancelled.append(chunk)
            raise
        return chunk

    async def scenario() -> None:
        relay = relay_in_order(["first", "second", "third"], synthesize)
        first = await relay.__anext__()
        assert first["index"] == 0
        await relay.aclose()

    asyncio.run(scenario())
    assert sorted(cancelled) == ["second", "third"]


def _wav(data: bytes) -> bytes:
    header = bytearray(44)
    header[0:4] = b"RIFF"
    struct.pack_into("<I", header, 4, 36 + len(data))
    header[8:16] = b"WAVEfmt "
    header[36:40] = b"data"
    struct.pack_into("<I", header, 40, len(data))
    return bytes(header) + data


def test_concat_wav_rewrites_size_fields():
    merged = concat_wav([_wav(b"\x01\x02"), _wav(b"\x03\x04\x05"), _wav(b"\x06")])
    assert merged[:4] == b"RIFF"
    assert merged[44:] == b"\x01\x02\x03\x04\x05\x06"
    assert struct.unpack_from("<I", merged, 4)[0] == 36 + 6
    assert struct.unpack_from("<I", merged, 40)[0] == 6


def test_concat_wav_single_payload_is_unchanged():
    single = _wav(b"abc")
    assert concat_wav([single]) == single
