"""
Error types raised at service seams.

Adapters translate library exceptions (anthropic, edge-tts, pygame,
speech_recognition) into these so controllers can downgrade them without
knowing which library sits underneath.
"""


class MiseError(Exception):
    """Base class for recoverable assistant errors."""


class GenerationError(MiseError):
    """The generation model call failed or returned nothing usable."""


class SynthesisError(MiseError):
    """Remote speech synthesis failed or returned no audio."""


class PlaybackError(MiseError):
    """Audio could not be played back."""


class CaptureUnavailableError(MiseError):
    """No speech capture device is available in this environment."""
