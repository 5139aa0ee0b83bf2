"""
Voice Panel Component - voice controls for the cooking screen.

Provides:
- Listen once / hands-free ("Hey Mise") microphone controls
- Tap to talk recording as a fallback for browsers without a server mic
- Voice selector (edge-tts neural voices)
- Speed slider
"""

import streamlit as st
from typing import Optional, Callable


# Speed labels for the slider
SPEED_LABELS = {
    -2: "Slower",
    -1: "Slow",
    0: "Normal",
    1: "Fast",
    2: "Faster",
    3: "Quick",
    4: "Rapid",
}


def render_listening_controls(
    hands_free_on: bool,
    on_listen_once: Callable[[], bool],
    on_hands_free_change: Callable[[bool], None],
):
    """
    Render the microphone listening controls.

    Args:
        hands_free_on: Whether hands-free mode is currently active
        on_listen_once: Callback for a single utterance
        on_hands_free_change: Callback when the hands-free toggle flips
    """
    st.markdown("**Listen**")

    if st.button("Listen once", use_container_width=True, key="voice_listen_once", disabled=hands_free_on):
        on_listen_once()

    hands_free = st.toggle(
        'Hands-free ("Hey Mise")',
        value=hands_free_on,
        help='Keeps listening. Start each command with "Hey Mise", e.g. "Hey Mise, next".',
    )
    if hands_free != hands_free_on:
        on_hands_free_change(hands_free)


def render_voice_panel(
    audio_key: int,
    voices: dict[str, str],
    current_voice: str,
    current_speed: int,
    on_voice_change: Callable[[str], None],
    on_speed_change: Callable[[int], None],
) -> Optional[bytes]:
    """
    Render tap-to-talk and voice settings.

    Args:
        audio_key: Unique key for the audio input widget
        voices: Dict of {voice_id: display_name}
        current_voice: Currently selected voice ID
        current_speed: Current speed slider value (-2 to +4)
        on_voice_change: Callback when voice changes (receives voice_id)
        on_speed_change: Callback when speed changes (receives slider value)

    Returns:
        Audio bytes if recording captured, None otherwise
    """
    # Custom CSS for the voice panel
    st.markdown("""
    <style>
        /* Make the audio input button larger and more touch-friendly */
        div[data-testid="stAudioInput"] > button {
            height: 80px !important;
            min-height: 80px !important;
            font-size: 20px !important;
            border-radius: 40px !important;
        }
        div[data-testid="stAudioInput"] {
            display: flex;
            justify-content: center;
        }
    </style>
    """, unsafe_allow_html=True)

    st.markdown("**Tap to Talk**")

    audio = st.audio_input(
        "Record your message",
        key=f"audio_input_{audio_key}",
        label_visibility="collapsed"
    )

    recorded_bytes = None
    if audio:
        recorded_bytes = audio.read()

    st.markdown("---")

    # Voice selector
    st.markdown("**Voice**")
    voice_ids = list(voices.keys())
    voice_names = list(voices.values())

    current_idx = 0
    if current_voice in voice_ids:
        current_idx = voice_ids.index(current_voice)

    selected_name = st.selectbox(
        "Select voice:",
        options=voice_names,
        index=current_idx,
        label_visibility="collapsed",
        key="voice_panel_voice"
    )

    selected_voice_id = voice_ids[voice_names.index(selected_name)]
    if selected_voice_id != current_voice:
        on_voice_change(selected_voice_id)

    # Speed slider
    st.markdown("**Speed**")
    selected_speed = st.slider(
        "Playback speed",
        min_value=-2,
        max_value=4,
        value=current_speed,
        step=1,
        format="%d",
        label_visibility="collapsed",
        key="voice_panel_speed",
        help="Adjust voice playback speed"
    )
    st.caption(f"Speed: {SPEED_LABELS.get(selected_speed, 'Normal')}")

    if selected_speed != current_speed:
        on_speed_change(selected_speed)

    return recorded_bytes


def render_audio_playback(audio_bytes: Optional[bytes]):
    """
    Play a narration clip in the browser.

    Args:
        audio_bytes: MP3 audio bytes to play
    """
    if audio_bytes:
        st.audio(audio_bytes, format="audio/mp3", autoplay=True)
