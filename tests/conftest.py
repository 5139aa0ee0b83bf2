import asyncio
from typing import Optional

import pytest

from config.settings import DEFAULT_WAKE_PHRASES
from controllers.voice_commands import WakePhraseMatcher
from models.cooking_session import CookingSession
from models.recipe import ImageInput, Recipe
from services.errors import CaptureUnavailableError, GenerationError, PlaybackError, SynthesisError
from services.ports import (
    AudioSink,
    CaptureHandlers,
    CapturePort,
    CaptureSubscription,
    GenerationPort,
    RemoteSynthesizer,
    SynthesisPort,
    Voice,
)


class FakeSubscription(CaptureSubscription):
    def __init__(self, continuous: bool, handlers: CaptureHandlers):
        self.continuous = continuous
        self.handlers = handlers
        self.started = False
        self.stopped = False
        self.aborted = False
        self.ended = False

    def start(self):
        self.started = True
        self.handlers.on_start()

    def stop(self):
        self.stopped = True

    def abort(self):
        self.aborted = True

    @property
    def active(self) -> bool:
        return self.started and not (self.stopped or self.aborted or self.ended)

    # Simulated device events
    def result(self, *transcripts: str):
        self.handlers.on_result(list(transcripts))

    def error(self, kind: str):
        self.handlers.on_error(kind)

    def end(self):
        self.ended = True
        self.handlers.on_end()


class FakeCapture(CapturePort):
    def __init__(self, supported: bool = True, open_error: bool = False):
        self.supported = supported
        self.open_error = open_error
        self.subscriptions: list[FakeSubscription] = []

    def is_supported(self) -> bool:
        return self.supported

    def open(self, continuous: bool, handlers: CaptureHandlers) -> FakeSubscription:
        if self.open_error:
            raise CaptureUnavailableError("microphone busy")
        sub = FakeSubscription(continuous, handlers)
        self.subscriptions.append(sub)
        return sub

    @property
    def active(self) -> list[FakeSubscription]:
        return [s for s in self.subscriptions if s.active]

    @property
    def latest(self) -> FakeSubscription:
        return self.subscriptions[-1]


class FakeGenerator(GenerationPort):
    """Replies with canned text; records every prompt."""

    def __init__(self, replies=None, fail: bool = False):
        self.replies = list(replies or [])
        self.fail = fail
        self.prompts: list[str] = []
        self.images: list[Optional[ImageInput]] = []

    def generate_text(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        self.prompts.append(prompt)
        self.images.append(image)
        if self.fail:
            raise GenerationError("service unavailable")
        return self.replies.pop(0) if self.replies else "OK"

    async def generate(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        return self.generate_text(prompt, image)


class RecordingNarrator:
    def __init__(self):
        self.spoken: list[str] = []

    async def speak(self, text: str) -> None:
        self.spoken.append(text)


class FakeRemote(RemoteSynthesizer):
    def __init__(self, audio: bytes = b"ID3fake-mp3", fail: bool = False):
        self.audio = audio
        self.fail = fail
        self.calls: list[tuple[str, str, str]] = []

    async def synthesize(self, text: str, voice: str, rate: str) -> bytes:
        self.calls.append((text, voice, rate))
        if self.fail:
            raise SynthesisError("503 from synthesis service")
        return self.audio


class FakeSink(AudioSink):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.played: list[tuple[str, bytes]] = []

    async def play(self, path: str) -> None:
        with open(path, "rb") as f:
            self.played.append((path, f.read()))
        if self.fail:
            raise PlaybackError("output device unavailable")


class FakeLocalSynthesis(SynthesisPort):
    """
    On-device synthesizer double.

    catalog_delay: seconds until the voice catalog appears (None = never)
    """

    def __init__(self, voices=None, supported: bool = True, fail: bool = False, catalog_delay: Optional[float] = 0):
        self._catalog = list(voices or [])
        self._loaded = catalog_delay == 0
        self.catalog_delay = catalog_delay
        self.supported = supported
        self.fail = fail
        self.spoken: list[tuple[str, Optional[Voice], float]] = []

    def is_supported(self) -> bool:
        return self.supported

    def voices(self) -> list[Voice]:
        return list(self._catalog) if self._loaded else []

    def on_voices_changed(self, callback) -> None:
        if self.catalog_delay is None:
            return
        loop = asyncio.get_running_loop()

        def load():
            self._loaded = True
            callback()

        loop.call_later(self.catalog_delay, load)

    def speak(self, text, voice, on_done, on_error, rate=1.0, pitch=1.0, volume=1.0):
        self.spoken.append((text, voice, rate))
        loop = asyncio.get_running_loop()
        if self.fail:
            loop.call_soon(on_error, "synthesis-failed")
        else:
            loop.call_soon(on_done)


@pytest.fixture
def recipe():
    return Recipe(
        name="Garlic Rice",
        prepTime="20min",
        ingredients=["1 cup rice", "2 cloves garlic", "salt"],
        instructions=["Rinse the rice", "Fry the garlic", "Simmer for 15 minutes"],
        difficulty="Easy",
    )


@pytest.fixture
def session(recipe):
    return CookingSession(recipe=recipe)


@pytest.fixture
def wake_matcher():
    return WakePhraseMatcher(DEFAULT_WAKE_PHRASES)
