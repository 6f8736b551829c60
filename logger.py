# logger.py
import logging
import os
from datetime import datetime
from typing import Optional

from config import LOG_DIR


class ChatLogger:
    """Logger for one chat session's connection and message events."""

    def __init__(self, name: str = "client", log_dir: Optional[str] = None):
        """
        Initialize logger for a session.

        Args:
            name: Label used in the log file name (e.g. "client", "server")
            log_dir: Directory to store log files (defaults to LOG_DIR or ./logs)
        """
        self.name = name

        # Set up log directory
        if log_dir is None:
            log_dir = LOG_DIR or os.path.join(os.getcwd(), "logs")
        self.log_dir = str(log_dir)
        os.makedirs(self.log_dir, exist_ok=True)

        # Create timestamped log file
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filename = f"{name}_{timestamp}.log"
        self.log_path = os.path.join(self.log_dir, log_filename)

        self.logger = logging.getLogger(f"LineChat.{name}")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

        # Remove existing handlers to avoid duplicates
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        # File handler
        file_handler = logging.FileHandler(self.log_path, encoding='utf-8')
        file_handler.setLevel(logging.INFO)

        # Formatter
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)
        self._handler = file_handler

        # Log session start
        self.logger.info("=" * 60)
        self.logger.info(f"LineChat Session Started - {name}")
        self.logger.info("=" * 60)

    def log_connection(self, address: str, status: str):
        """Log a connection attempt."""
        self.logger.info(f"CONNECT  | {address} - Status: {status}")

    def log_disconnection(self, address: str):
        """Log disconnection from a peer."""
        self.logger.info(f"CONNECT  | Disconnected from {address}")

    def log_message_sent(self, recipient: str, message: str):
        self.logger.info(f"CHAT OUT | To: {recipient} | Message: {message}")

    def log_message_received(self, sender: str, message: str):
        self.logger.info(f"CHAT IN  | From: {sender} | Message: {message}")

    def log_error(self, component: str, error: str):
        """Log general error."""
        self.logger.error(f"{component} | Error: {error}")

    def log_info(self, component: str, message: str):
        """Log general info."""
        self.logger.info(f"{component} | {message}")

    def close(self):
        """Close the logger and log session end."""
        if self._handler not in self.logger.handlers:
            return
        self.logger.info("=" * 60)
        self.logger.info(f"LineChat Session Ended - {self.name}")
        self.logger.info("=" * 60)

        self._handler.close()
        self.logger.removeHandler(self._handler)
