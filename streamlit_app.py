"""
Mise - voice cooking assistant

Suggests recipes from what you have, then talks you through
cooking one step by step ("Hey Mise, next").
"""

import streamlit as st

from config import configure_logging, get_settings
from views import CookingView

# Page configuration (must be first Streamlit command)
st.set_page_config(
    page_title="Mise",
    page_icon="🍳",
    layout="wide"
)

configure_logging(get_settings().log_level)

CookingView().render()
