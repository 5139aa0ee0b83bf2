"""
Logging setup shared by the Streamlit app and background voice runtime.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process (Streamlit reruns the script)."""
    global _configured
    if _configured:
        return

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Third-party clients are chatty at INFO
    for noisy in ("httpx", "anthropic", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    _configured = True
