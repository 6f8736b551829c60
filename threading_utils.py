# threading_utils.py
"""Threading helpers shared by the chat session and the echo server."""

import threading


def start_daemon_thread(target, args=(), name=None) -> threading.Thread:
    """Start a daemon thread so it never keeps the process alive."""
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    return thread
