from types import SimpleNamespace

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from gui import ChatClientGUI  # noqa: E402


class RecordingSession:
    def __init__(self):
        self.sent = []

    def send_line(self, text):
        self.sent.append(text)


class LineInput:
    def __init__(self, text):
        self._text = text

    def text(self):
        return self._text

    def clear(self):
        self._text = ""


def _window(**attrs):
    calls = []
    window = SimpleNamespace(
        session=RecordingSession(),
        msg_input=LineInput(""),
        send_btn=SimpleNamespace(setEnabled=lambda enabled: calls.append(("enabled", enabled))),
        _set_status=lambda text: calls.append(("status", text)),
        _append_chat_bubble=lambda text, outgoing: calls.append(("bubble", text, outgoing)),
        _append_chat_line=lambda text: calls.append(("line", text)),
    )
    for key, value in attrs.items():
        setattr(window, key, value)
    return window, calls


def test_submitted_line_is_trimmed():
    window, calls = _window(msg_input=LineInput("  hello there \t"))
    ChatClientGUI.send_message(window)
    assert window.session.sent == ["hello there"]
    assert window.msg_input.text() == ""
    assert ("bubble", "hello there", True) in calls


def test_blank_line_is_still_sent():
    window, _ = _window(msg_input=LineInput("   "))
    ChatClientGUI.send_message(window)
    assert window.session.sent == [""]


def test_receive_error_goes_to_status_bar(capsys):
    window, calls = _window()
    ChatClientGUI.handle_network_event(
        window, {"type": "closed", "level": "error", "message": "receive failed: boom"}
    )
    assert ("status", "Disconnected: receive failed: boom") in calls
    assert ("enabled", False) in calls
    assert capsys.readouterr().out == ""


def test_peer_close_shows_disconnected(capsys):
    window, calls = _window()
    ChatClientGUI.handle_network_event(
        window, {"type": "closed", "level": "info", "message": "Peer disconnected"}
    )
    assert ("line", "Peer disconnected") in calls
    assert ("status", "Disconnected") in calls
    assert capsys.readouterr().out == ""
