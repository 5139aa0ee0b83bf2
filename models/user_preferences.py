"""
Voice preferences - narration voice and speed options for the UI.

Remote narration uses edge-tts neural voices; the local fallback picks the
best installed system voice using PREFERRED_VOICE_MARKERS.
"""

from pydantic import BaseModel, Field


# Available edge-tts voices for English (US, UK, Ireland)
VOICE_OPTIONS = {
    "en-US-AriaNeural": "Aria (US, Female)",
    "en-US-GuyNeural": "Guy (US, Male)",
    "en-US-JennyNeural": "Jenny (US, Female)",
    "en-US-ChristopherNeural": "Christopher (US, Male)",
    "en-GB-SoniaNeural": "Sonia (UK, Female)",
    "en-GB-RyanNeural": "Ryan (UK, Male)",
    "en-IE-EmilyNeural": "Emily (Ireland, Female)",
}

DEFAULT_VOICE_NAME = "en-US-AriaNeural"
DEFAULT_VOICE_RATE = "+0%"

# Slider value -> edge-tts rate
SPEED_OPTIONS = {
    -2: "-20%",
    -1: "-10%",
    0: "+0%",
    1: "+10%",
    2: "+20%",
    3: "+30%",
    4: "+40%",
}

# Substrings in a system voice name that usually mean a better-sounding voice,
# strongest signal first
PREFERRED_VOICE_MARKERS = ("neural", "natural", "premium", "enhanced", "siri", "google")


class VoicePreferences(BaseModel):
    """Narration voice settings for the current browser session."""
    name: str = Field(default=DEFAULT_VOICE_NAME, description="Edge-TTS voice ID")
    rate: str = Field(default=DEFAULT_VOICE_RATE, description="Speech rate (e.g., '+20%')")

    @property
    def speed(self) -> float:
        """Rate as a playback multiplier ('+20%' -> 1.2)."""
        return rate_to_speed(self.rate)


def rate_to_slider_value(rate: str) -> int:
    """Convert edge-tts rate string to slider value."""
    for slider_val, rate_str in SPEED_OPTIONS.items():
        if rate_str == rate:
            return slider_val
    return 0


def slider_value_to_rate(slider_val: int) -> str:
    """Convert slider value to edge-tts rate string."""
    return SPEED_OPTIONS.get(slider_val, DEFAULT_VOICE_RATE)


def rate_to_speed(rate: str) -> float:
    """'+20%' -> 1.2, '-10%' -> 0.9; unparseable rates mean normal speed."""
    try:
        return 1.0 + int(rate.strip().rstrip("%")) / 100
    except (ValueError, AttributeError):
        return 1.0
