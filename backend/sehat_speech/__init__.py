from .sarvam import SarvamClient, speech_code
from .segmenter import segment, strip_markdown
from .tts_duplex import CompletionGuard, DuplexSynthesisRelay
from .tts_relay import concat_wav, relay_in_order

__all__ = [
    "CompletionGuard",
    "DuplexSynthesisRelay",
    "SarvamClient",
    "concat_wav",
    "relay_in_order",
    "segment",
    "speech_code",
    "strip_markdown",
]
