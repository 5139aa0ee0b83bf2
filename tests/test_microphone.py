import asyncio
import threading
import time

import pytest
import speech_recognition as sr

from services import microphone
from services.microphone import MicrophoneCapture
from services.ports import NO_SPEECH, CaptureHandlers


class Device:
    """Counts how many microphone streams are open at once."""

    def __init__(self):
        self.lock = threading.Lock()
        self.open_now = 0
        self.max_open = 0
        self.opened = 0

    def microphone(self):
        device = self

        class CountingMicrophone:
            def __enter__(self):
                with device.lock:
                    device.open_now += 1
                    device.opened += 1
                    device.max_open = max(device.max_open, device.open_now)
                return self

            def __exit__(self, *exc):
                with device.lock:
                    device.open_now -= 1
                return False

        return CountingMicrophone


class TalkingRecognizer:
    """Hears the same phrase every 50 ms."""

    def __init__(self):
        self.dynamic_energy_threshold = False

    def adjust_for_ambient_noise(self, source, duration=1):
        pass

    def listen(self, source, timeout=None, phrase_time_limit=None):
        time.sleep(0.05)
        return "audio"

    def recognize_google(self, audio):
        return "hey mise next"


class SilentRecognizer(TalkingRecognizer):
    def listen(self, source, timeout=None, phrase_time_limit=None):
        time.sleep(timeout)
        raise sr.WaitTimeoutError("listening timed out while waiting for phrase to start")


@pytest.fixture
def device(monkeypatch):
    device = Device()
    monkeypatch.setattr(microphone.sr, "Microphone", device.microphone())
    monkeypatch.setattr(microphone, "LISTEN_SLICE", 0.05)
    return device


def recording_handlers(events):
    return CaptureHandlers(
        on_start=lambda: events.append("start"),
        on_result=lambda transcripts: events.append(("result", transcripts)),
        on_error=lambda kind: events.append(("error", kind)),
        on_end=lambda: events.append("end"),
    )


async def finish(*subscriptions):
    for sub in subscriptions:
        await asyncio.to_thread(sub._thread.join, 2)
    # Let queued callbacks run
    await asyncio.sleep(0.01)


def test_replacement_waits_for_aborted_subscription(device, monkeypatch):
    monkeypatch.setattr(microphone.sr, "Recognizer", TalkingRecognizer)
    capture = MicrophoneCapture(listen_timeout=5.0)
    events = []

    async def run():
        first = capture.open(True, recording_handlers(events))
        first.start()
        await asyncio.sleep(0.12)
        first.abort()
        second = capture.open(True, recording_handlers(events))
        second.start()
        await asyncio.sleep(0.15)
        second.abort()
        await finish(first, second)
        return first, second

    first, second = asyncio.run(run())

    assert device.max_open == 1
    assert device.opened == 2
    assert first.recognizer is not second.recognizer
    assert ("result", ["hey mise next"]) in events


def test_subscription_aborted_before_device_is_free_never_opens_it(device, monkeypatch):
    monkeypatch.setattr(microphone.sr, "Recognizer", TalkingRecognizer)
    capture = MicrophoneCapture()
    events = []

    async def run():
        first = capture.open(True, recording_handlers(events))
        first.start()
        await asyncio.sleep(0.02)
        second = capture.open(True, recording_handlers(events))
        second.start()
        second.abort()
        first.abort()
        await finish(first, second)

    asyncio.run(run())

    assert device.opened == 1
    assert events.count("end") == 2


def test_abort_while_waiting_for_speech_returns_quickly(device, monkeypatch):
    monkeypatch.setattr(microphone.sr, "Recognizer", SilentRecognizer)
    capture = MicrophoneCapture(listen_timeout=30.0)
    events = []

    async def run():
        sub = capture.open(True, recording_handlers(events))
        sub.start()
        await asyncio.sleep(0.1)
        sub.abort()
        await finish(sub)
        return sub

    sub = asyncio.run(run())

    assert not sub._thread.is_alive()
    assert device.open_now == 0
    assert ("error", NO_SPEECH) not in events
    assert events[-1] == "end"


def test_silence_for_whole_listen_timeout_is_no_speech(device, monkeypatch):
    monkeypatch.setattr(microphone.sr, "Recognizer", SilentRecognizer)
    capture = MicrophoneCapture(listen_timeout=0.12)
    events = []

    async def run():
        sub = capture.open(True, recording_handlers(events))
        sub.start()
        await finish(sub)

    asyncio.run(run())

    assert events == ["start", ("error", NO_SPEECH), "end"]
