from __future__ import annotations

import asyncio
import logging
import struct
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

WAV_HEADER_BYTES = 44

Synthesizer = Callable[[str], Awaitable[str]]


async def relay_in_order(chunks: Sequence[str], synthesize: Synthesizer) -> AsyncIterator[dict[str, Any]]:
    """Synthesize every chunk concurrently and yield audio strictly in chunk order.

    A failed chunk is skipped. The final ``done`` event counts chunks attempted.
    Synthesis still in flight is cancelled if the consumer stops early.
    """
    total = len(chunks)
    tasks = [asyncio.ensure_future(synthesize(chunk)) for chunk in chunks]
    try:
        for index, task in enumerate(tasks):
            try:
                audio = await task
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("tts chunk %d/%d failed: %s", index + 1, total, exc)
                continue
            if not audio:
                logger.warning("tts chunk %d/%d returned no audio", index + 1, total)
                continue
            yield {"type": "audio", "index": index, "total": total, "audio": audio}
        yield {"type": "done", "totalChunks": total}
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def concat_wav(payloads: Sequence[bytes]) -> bytes:
    """Join WAV payloads that share a 44-byte header, rewriting the RIFF and data sizes."""
    parts = [payload for payload in payloads if payload]
    if not parts:
        return b""
    if len(parts) == 1:
        return parts[0]

    header = bytearray(parts[0][:WAV_HEADER_BYTES])
    if len(header) < WAV_HEADER_BYTES:
        raise ValueError("first WAV payload is shorter than its header")
    data = b"".join(part[WAV_HEADER_BYTES:] for part in parts)
    struct.pack_into("<I", header, 4, 36 + len(data))
    struct.pack_into("<I", header, 40, len(data))
    return bytes(header) + data
