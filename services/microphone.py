"""
Microphone capture - SpeechRecognition-backed CapturePort.

Each subscription runs a worker thread that listens on the default
microphone and transcribes with Google Speech Recognition. Events are
handed to the controller's event loop with call_soon_threadsafe, so the
controller only ever sees them on its own thread.

A continuous subscription keeps listening across utterances until it is
stopped or hits an error; a single-shot one ends after the first utterance.
Either way on_end fires last.

Only one subscription holds the microphone at a time: a new one waits on the
device lock until the thread of the one it replaced has closed the stream.
Listening is done in short slices so an aborted subscription lets go quickly.
"""

import asyncio
import logging
import threading
import time
from typing import Optional

import speech_recognition as sr

from services.ports import (
    AUDIO_CAPTURE,
    NETWORK,
    NO_SPEECH,
    CaptureHandlers,
    CapturePort,
    CaptureSubscription,
)

logger = logging.getLogger(__name__)

# Longest wait for speech to begin before checking for abort (seconds)
LISTEN_SLICE = 1.0


class MicrophoneSubscription(CaptureSubscription):
    """One listening session on the default microphone."""

    def __init__(
        self,
        recognizer: sr.Recognizer,
        continuous: bool,
        handlers: CaptureHandlers,
        loop: asyncio.AbstractEventLoop,
        device_lock: threading.Lock,
        listen_timeout: float,
        phrase_time_limit: float,
    ):
        self.recognizer = recognizer
        self.device_lock = device_lock
        self.continuous = continuous
        self.handlers = handlers
        self.loop = loop
        self.listen_timeout = listen_timeout
        self.phrase_time_limit = phrase_time_limit
        self._stopping = threading.Event()
        self._aborted = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="mic-capture")
        self._thread.start()

    def stop(self) -> None:
        self._stopping.set()

    def abort(self) -> None:
        self._aborted.set()
        self._stopping.set()

    def _emit(self, callback, *args) -> None:
        # After abort only on_end is delivered
        if self._aborted.is_set() and callback is not self.handlers.on_end:
            return
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(callback, *args)

    def _listen(self, source: sr.Microphone) -> Optional[sr.AudioData]:
        """
        Wait up to listen_timeout for one phrase.

        Returns None if the subscription was aborted meanwhile; raises
        sr.WaitTimeoutError if nobody spoke.
        """
        deadline = time.monotonic() + self.listen_timeout
        while not self._aborted.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise sr.WaitTimeoutError("listening timed out while waiting for phrase to start")
            try:
                return self.recognizer.listen(
                    source,
                    timeout=min(LISTEN_SLICE, remaining),
                    phrase_time_limit=self.phrase_time_limit,
                )
            except sr.WaitTimeoutError:
                continue
        return None

    def _run(self) -> None:
        self._emit(self.handlers.on_start)
        try:
            with self.device_lock:
                if not self._aborted.is_set():
                    self._capture()
        except (OSError, AttributeError) as e:
            # AttributeError: PyAudio missing; OSError: no input device / device busy
            logger.warning(f"Microphone error: {e}")
            self._emit(self.handlers.on_error, AUDIO_CAPTURE)
        finally:
            self._emit(self.handlers.on_end)

    def _capture(self) -> None:
        with sr.Microphone() as source:
            self.recognizer.adjust_for_ambient_noise(source, duration=0.3)
            while not self._stopping.is_set():
                try:
                    audio = self._listen(source)
                except sr.WaitTimeoutError:
                    self._emit(self.handlers.on_error, NO_SPEECH)
                    break

                if audio is None or self._aborted.is_set():
                    break

                try:
                    text = self.recognizer.recognize_google(audio)
                except sr.UnknownValueError:
                    self._emit(self.handlers.on_error, NO_SPEECH)
                    break
                except sr.RequestError as e:
                    logger.warning(f"Speech recognition service error: {e}")
                    self._emit(self.handlers.on_error, NETWORK)
                    break

                self._emit(self.handlers.on_result, [text])
                if not self.continuous:
                    break


class MicrophoneCapture(CapturePort):
    """CapturePort for the default system microphone."""

    def __init__(self, listen_timeout: float = 5.0, phrase_time_limit: float = 10.0):
        self._device_lock = threading.Lock()
        self.listen_timeout = listen_timeout
        self.phrase_time_limit = phrase_time_limit

    def is_supported(self) -> bool:
        try:
            names = sr.Microphone.list_microphone_names()
        except (AttributeError, OSError) as e:
            logger.warning(f"Microphone capture unavailable: {e}")
            return False
        return bool(names)

    def open(self, continuous: bool, handlers: CaptureHandlers) -> CaptureSubscription:
        # Each subscription calibrates its own recognizer
        recognizer = sr.Recognizer()
        recognizer.dynamic_energy_threshold = True
        return MicrophoneSubscription(
            recognizer=recognizer,
            continuous=continuous,
            handlers=handlers,
            loop=asyncio.get_running_loop(),
            device_lock=self._device_lock,
            listen_timeout=self.listen_timeout,
            phrase_time_limit=self.phrase_time_limit,
        )
