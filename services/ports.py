"""
Capability interfaces for everything the voice controller talks to.

The controller and narration service only see these ports, so the same code
runs against a real microphone/speaker or against test doubles:

- CapturePort: speech capture (start/stop/abort + start/result/error/end events)
- SynthesisPort: on-device speech output with an asynchronously loaded voice catalog
- RemoteSynthesizer: hosted text-to-speech returning audio bytes
- AudioSink: plays an audio file and completes when playback ends
- GenerationPort: hosted text/vision generation model
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from models.recipe import ImageInput


# Capture error kinds
NO_SPEECH = "no-speech"
ABORTED = "aborted"
NETWORK = "network"
AUDIO_CAPTURE = "audio-capture"


@dataclass
class CaptureHandlers:
    """Event callbacks for one capture subscription."""
    on_start: Callable[[], None]
    on_result: Callable[[list[str]], None]
    on_error: Callable[[str], None]
    on_end: Callable[[], None]


class CaptureSubscription(ABC):
    """One acquisition of the capture device."""

    @abstractmethod
    def start(self) -> None:
        """Begin capturing; fires on_start."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Graceful stop: finish the current utterance, then fire on_end."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Cancel immediately and discard any pending result."""
        pass


class CapturePort(ABC):
    """Speech capture device."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Probe whether capture is possible in this environment."""
        pass

    @abstractmethod
    def open(self, continuous: bool, handlers: CaptureHandlers) -> CaptureSubscription:
        """
        Create a subscription (not yet started).

        Args:
            continuous: Keep capturing utterances until stopped (hands-free)
                instead of stopping after the first one
            handlers: Event callbacks, invoked on the controller's event loop
        """
        pass


@dataclass(frozen=True)
class Voice:
    """An installed on-device voice."""
    id: str
    name: str
    language: str = ""


class SynthesisPort(ABC):
    """On-device speech synthesizer."""

    @abstractmethod
    def is_supported(self) -> bool:
        pass

    @abstractmethod
    def voices(self) -> list[Voice]:
        """Voice catalog; may be empty until the catalog has loaded."""
        pass

    @abstractmethod
    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        """Register a one-off callback fired when the catalog becomes available."""
        pass

    @abstractmethod
    def speak(
        self,
        text: str,
        voice: Optional[Voice],
        on_done: Callable[[], None],
        on_error: Callable[[str], None],
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        """Enqueue an utterance; exactly one of on_done/on_error fires."""
        pass


class RemoteSynthesizer(ABC):
    """Hosted text-to-speech."""

    #: File suffix of the returned audio
    audio_suffix = ".mp3"

    @abstractmethod
    async def synthesize(self, text: str, voice: str, rate: str) -> bytes:
        """
        Convert text to audio.

        Raises:
            SynthesisError: on any failure, including an empty response
        """
        pass


class AudioSink(ABC):
    """Plays audio files."""

    @abstractmethod
    async def play(self, path: str) -> None:
        """
        Play the file and return when playback ends.

        Raises:
            PlaybackError: if playback fails
        """
        pass


class GenerationPort(ABC):
    """Hosted text/vision generation model."""

    @abstractmethod
    async def generate(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        """
        Send a prompt (optionally with an inline image) and return the reply text.

        Raises:
            GenerationError: on network errors or an empty reply
        """
        pass
