import asyncio
import os

import pytest

from conftest import FakeLocalSynthesis, FakeRemote, FakeSink
from models.user_preferences import VoicePreferences
from services.errors import PlaybackError
from services.narration_service import NarrationService, choose_preferred_voice
from services.playback import BrowserAudioSink
from services.ports import Voice

VOICES = [
    Voice(id="1", name="Alex", language="en-US"),
    Voice(id="2", name="Samantha (Enhanced)", language="en-US"),
    Voice(id="3", name="Google Deutsch", language="de-DE"),
]


def test_remote_narration_plays_and_cleans_up():
    remote = FakeRemote(audio=b"mp3-bytes")
    sink = FakeSink()
    local = FakeLocalSynthesis(VOICES)
    narrator = NarrationService(
        remote=remote, sink=sink, local=local,
        voice=VoicePreferences(name="en-GB-SoniaNeural", rate="+10%"),
    )

    asyncio.run(narrator.speak("Step 1: Rinse the rice"))

    assert remote.calls == [("Step 1: Rinse the rice", "en-GB-SoniaNeural", "+10%")]
    path, audio = sink.played[0]
    assert audio == b"mp3-bytes"
    assert path.endswith(".mp3")
    assert not os.path.exists(path)
    assert local.spoken == []


def test_synthesis_failure_falls_back_to_local_voice():
    local = FakeLocalSynthesis(VOICES)
    narrator = NarrationService(remote=FakeRemote(fail=True), sink=FakeSink(), local=local)

    asyncio.run(narrator.speak("Step 2: Fry the garlic"))

    text, voice, _ = local.spoken[0]
    assert text == "Step 2: Fry the garlic"
    assert voice.name == "Samantha (Enhanced)"


def test_playback_failure_falls_back_and_removes_temp_file():
    sink = FakeSink(fail=True)
    local = FakeLocalSynthesis(VOICES)
    narrator = NarrationService(remote=FakeRemote(), sink=sink, local=local)

    asyncio.run(narrator.speak("Done!"))

    assert not os.path.exists(sink.played[0][0])
    assert [s[0] for s in local.spoken] == ["Done!"]


def test_local_only_when_remote_disabled():
    local = FakeLocalSynthesis(VOICES)
    narrator = NarrationService(local=local, voice=VoicePreferences(rate="+50%"))

    asyncio.run(narrator.speak("Hello"))

    assert local.spoken[0][2] == pytest.approx(1.5)


def test_local_error_still_completes():
    local = FakeLocalSynthesis(VOICES, fail=True)
    narrator = NarrationService(local=local)

    asyncio.run(asyncio.wait_for(narrator.speak("Hello"), timeout=1))

    assert len(local.spoken) == 1


def test_waits_for_voice_catalog():
    local = FakeLocalSynthesis(VOICES, catalog_delay=0.01)
    narrator = NarrationService(local=local, catalog_timeout=1.0)

    asyncio.run(narrator.speak("Hello"))

    assert local.spoken[0][1].id == "2"


def test_speaks_with_default_voice_when_catalog_never_loads():
    local = FakeLocalSynthesis(VOICES, catalog_delay=None)
    narrator = NarrationService(local=local, catalog_timeout=0.01)

    asyncio.run(narrator.speak("Hello"))

    assert local.spoken == [("Hello", None, 1.0)]


def test_no_speech_capability_is_a_no_op():
    narrator = NarrationService(local=FakeLocalSynthesis(supported=False))

    asyncio.run(narrator.speak("Hello"))
    asyncio.run(NarrationService().speak("Hello"))


def test_blank_text_is_not_spoken():
    remote = FakeRemote()
    narrator = NarrationService(remote=remote, sink=FakeSink())

    asyncio.run(narrator.speak("   "))

    assert remote.calls == []


def test_choose_preferred_voice():
    assert choose_preferred_voice(VOICES).id == "2"
    assert choose_preferred_voice(VOICES[:1]).id == "1"
    assert choose_preferred_voice([VOICES[2]]).id == "3"
    assert choose_preferred_voice([]) is None


def test_browser_sink_queues_audio(tmp_path):
    clip = tmp_path / "clip.mp3"
    clip.write_bytes(b"mp3")
    sink = BrowserAudioSink(wait_for_playback=False)

    asyncio.run(sink.play(str(clip)))

    assert sink.pop_pending() == b"mp3"
    assert sink.pop_pending() is None


def test_browser_sink_missing_file():
    sink = BrowserAudioSink(wait_for_playback=False)

    with pytest.raises(PlaybackError):
        asyncio.run(sink.play("/nonexistent/clip.mp3"))
