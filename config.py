# config.py
import os
from typing import Optional


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    """Read a float from the environment; empty or 'none' means no value."""
    val = os.getenv(name)
    if val is None:
        return default
    val = val.strip()
    if not val or val.lower() == "none":
        return None
    return float(val)


# Connection target (the peer the client talks to)
SERVER_HOST = os.getenv("LINECHAT_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("LINECHAT_PORT", "8888"))

# Seconds to wait for the TCP handshake
CONNECT_TIMEOUT = _env_float("LINECHAT_CONNECT_TIMEOUT", 5.0)
# Seconds a single read may block once connected (None = block forever)
READ_TIMEOUT = _env_float("LINECHAT_READ_TIMEOUT", None)
# Seconds disconnect() waits for the receive thread to finish
JOIN_TIMEOUT = 2.0

# Log files go to ./logs when unset
LOG_DIR = os.getenv("LINECHAT_LOG_DIR") or None

LISTEN_BACKLOG = 5
