# gui.py
import html
from datetime import datetime
from typing import Optional

from PyQt6 import QtCore, QtWidgets
from PyQt6.QtWidgets import (
    QMainWindow,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QHBoxLayout,
    QWidget,
    QLabel,
    QStatusBar,
    QMessageBox,
)

from config import SERVER_HOST, SERVER_PORT
from network import ChatSession, ConnectError, ReceiveError, WriteError
from threading_utils import start_daemon_thread


class NetworkEventBridge(QtCore.QObject):
    """Qt bridge object to safely receive events from the receive thread."""
    event_received = QtCore.pyqtSignal(dict)


# ----------------------------------------------------------------------
# Chat bubble widgets
# ----------------------------------------------------------------------
class ChatBubble(QWidget):
    def __init__(self, text: str, outgoing: bool, timestamp: Optional[datetime] = None):
        super().__init__()

        outer_layout = QHBoxLayout(self)
        outer_layout.setContentsMargins(8, 2, 8, 2)
        outer_layout.setSpacing(8)

        bubble_container = QWidget()
        bubble_layout = QVBoxLayout(bubble_container)
        bubble_layout.setContentsMargins(0, 0, 0, 0)
        bubble_layout.setSpacing(2)

        bubble = QLabel()
        bubble.setWordWrap(True)
        bubble.setTextFormat(QtCore.Qt.TextFormat.RichText)
        bubble.setMaximumWidth(480)
        bubble.setText(
            f"<div style='font-size: 14px; line-height: 1.4;'>{html.escape(text)}</div>"
        )

        align = QtCore.Qt.AlignmentFlag.AlignRight if outgoing else QtCore.Qt.AlignmentFlag.AlignLeft
        time_label = QLabel((timestamp or datetime.now()).strftime("%I:%M %p"))
        time_label.setAlignment(align)
        time_label.setStyleSheet("color: #86868b; font-size: 10px; padding: 2px 14px;")

        if outgoing:
            bubble.setStyleSheet(
                """
                QLabel {
                    background: #0a84ff;
                    color: #ffffff;
                    padding: 11px 16px;
                    border-radius: 20px;
                    border-bottom-right-radius: 6px;
                }
                """
            )
        else:
            bubble.setStyleSheet(
                """
                QLabel {
                    background: #e8eaed;
                    color: #1d1d1f;
                    padding: 11px 16px;
                    border-radius: 20px;
                    border-bottom-left-radius: 6px;
                }
                """
            )

        bubble_layout.addWidget(bubble, 0, align)
        bubble_layout.addWidget(time_label, 0, align)
        if outgoing:
            outer_layout.addStretch()
            outer_layout.addWidget(bubble_container)
        else:
            outer_layout.addWidget(bubble_container)
            outer_layout.addStretch()


class SystemLine(QWidget):
    def __init__(self, text: str):
        super().__init__()
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 0, 4, 0)
        layout.setSpacing(0)

        label = QLabel(text)
        label.setAlignment(QtCore.Qt.AlignmentFlag.AlignHCenter)
        label.setStyleSheet("color: #86868b; font-size: 11px; font-weight: 500;")

        layout.addStretch()
        layout.addWidget(label)
        layout.addStretch()


# ----------------------------------------------------------------------
# Main GUI
# ----------------------------------------------------------------------
class ChatClientGUI(QMainWindow):
    def __init__(self, host: str = SERVER_HOST, port: int = SERVER_PORT):
        super().__init__()

        self.setWindowTitle("LineChat")
        self.resize(420, 520)

        self.host = host
        self.port = port
        self.session: Optional[ChatSession] = None

        # Bridge for thread-safe network events
        self._event_bridge = NetworkEventBridge()
        self._event_bridge.event_received.connect(self.handle_network_event)

        self._setup_ui()

    # ------------------------------------------------------------------
    # UI setup
    # ------------------------------------------------------------------
    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout()
        main_layout.setSpacing(8)
        main_layout.setContentsMargins(12, 12, 12, 12)
        central.setLayout(main_layout)

        # Connection row
        conn_layout = QHBoxLayout()
        self.host_edit = QLineEdit(self.host)
        self.host_edit.setPlaceholderText("Host")
        self.port_edit = QLineEdit(str(self.port))
        self.port_edit.setPlaceholderText("Port")
        self.port_edit.setMaximumWidth(80)
        self.connect_btn = QPushButton("Connect")
        self.connect_btn.clicked.connect(self.on_connect_clicked)
        conn_layout.addWidget(self.host_edit)
        conn_layout.addWidget(self.port_edit)
        conn_layout.addWidget(self.connect_btn)
        main_layout.addLayout(conn_layout)

        # Chat area: scroll area with vertical layout of bubbles
        self.chat_area = QtWidgets.QScrollArea()
        self.chat_area.setWidgetResizable(True)
        self.chat_area.setFrameShape(QtWidgets.QFrame.Shape.NoFrame)

        self.chat_container = QWidget()
        self.chat_layout = QVBoxLayout()
        self.chat_layout.setContentsMargins(4, 4, 4, 4)
        self.chat_layout.setSpacing(8)
        self.chat_layout.addStretch()  # spacer at bottom
        self.chat_container.setLayout(self.chat_layout)

        self.chat_area.setWidget(self.chat_container)
        main_layout.addWidget(self.chat_area)

        # Message input row
        msg_layout = QHBoxLayout()
        self.msg_input = QLineEdit()
        self.msg_input.setPlaceholderText("Type a message...")
        self.msg_input.returnPressed.connect(self.send_message)
        self.send_btn = QPushButton("Send")
        self.send_btn.clicked.connect(self.send_message)
        self.send_btn.setEnabled(False)
        msg_layout.addWidget(self.msg_input)
        msg_layout.addWidget(self.send_btn)
        main_layout.addLayout(msg_layout)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self._set_status("Disconnected")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def on_connect_clicked(self):
        if self.session:
            # Already connected -> exit app (simple behaviour)
            self.close()
            return

        self.host = self.host_edit.text().strip() or SERVER_HOST
        try:
            self.port = int(self.port_edit.text().strip() or SERVER_PORT)
        except ValueError:
            QMessageBox.warning(self, "Invalid port", "Port must be a number.")
            return

        session = ChatSession()
        self._set_status(f"Connecting to {self.host}:{self.port}...")
        try:
            session.connect(self.host, self.port)
        except ConnectError as e:
            session.disconnect()
            QMessageBox.critical(self, "Error", f"Failed to connect: {e}")
            self._set_status("Disconnected")
            return

        self.session = session
        session.start_receiving()
        start_daemon_thread(self._pump_received_lines, args=(session,), name="linechat-pump")

        self._set_status(f"Connected to {session.address}")
        self.connect_btn.setText("Quit")
        self.host_edit.setEnabled(False)
        self.port_edit.setEnabled(False)
        self.send_btn.setEnabled(True)
        self.msg_input.setFocus()

    def send_message(self):
        if not self.session:
            QMessageBox.warning(self, "Not connected", "Connect to a peer first.")
            return

        # Every submitted line is sent, blank ones included
        msg = self.msg_input.text().strip()
        self.msg_input.clear()

        try:
            self.session.send_line(msg)
        except WriteError as e:
            self._set_status(f"Send failed: {e}")
            return
        self._append_chat_bubble(msg, outgoing=True)

    def _pump_received_lines(self, session: ChatSession) -> None:
        """Runs on a worker thread; forwards lines to the GUI thread."""
        emit = self._event_bridge.event_received.emit
        try:
            for line in session.received_lines():
                emit({"type": "chat_message", "message": line})
        except ReceiveError as e:
            emit({"type": "closed", "level": "error", "message": str(e)})
        else:
            emit({"type": "closed", "level": "info", "message": "Peer disconnected"})

    # ------------------------------------------------------------------
    # Network event handling (called on main thread via signal)
    # ------------------------------------------------------------------
    @QtCore.pyqtSlot(dict)
    def handle_network_event(self, event: dict):
        etype = event.get("type")

        if etype == "chat_message":
            self._append_chat_bubble(event.get("message", ""), outgoing=False)

        elif etype == "closed":
            msg = event.get("message", "")
            self._append_chat_line(msg)
            self.send_btn.setEnabled(False)
            if event.get("level") == "error":
                self._set_status(f"Disconnected: {msg}")
            else:
                self._set_status("Disconnected")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _add_chat_widget(self, widget: QWidget):
        # Insert above the stretch at the bottom
        index = self.chat_layout.count() - 1
        self.chat_layout.insertWidget(index, widget)
        QtCore.QTimer.singleShot(0, self._scroll_to_bottom)

    def _scroll_to_bottom(self):
        bar = self.chat_area.verticalScrollBar()
        bar.setValue(bar.maximum())

    def _append_chat_line(self, text: str):
        """Append a system message line."""
        self._add_chat_widget(SystemLine(text))

    def _append_chat_bubble(self, message: str, outgoing: bool):
        self._add_chat_widget(ChatBubble(message, outgoing, datetime.now()))

    def _set_status(self, text: str):
        self.status_bar.showMessage(text)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def closeEvent(self, event):
        if self.session:
            self.session.disconnect()
        event.accept()
