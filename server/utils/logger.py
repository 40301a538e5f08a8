"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, CHAT_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(exist_ok=True)

        # Set up main logger
        self.logger = logging.getLogger('broadcast_chat_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Set up file paths
        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

    def set_logs_dir(self, logs_dir: str):
        """Move the chat audit log to another directory."""
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

    def set_level(self, log_level: int):
        """Change the level of the logger and its console handler."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_server_started(self, server_ip: str, port: int):
        """Log server start."""
        self.info(f"Server started at IP: {server_ip} on port {port}")

    def log_server_stopped(self, notified: int):
        """Log server stop."""
        self.info(f"Server disconnected ({notified} client(s) notified)")

    def log_connection(self, addr):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_join(self, name: str, addr):
        """Log a completed handshake."""
        self.info(f"{name} has joined the chat (from {addr})")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | JOIN | {name}")

    def log_leave(self, name: str, graceful: bool):
        """Log a departure."""
        how = "left" if graceful else "disconnected"
        self.info(f"{name} has {how} the chat")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | LEAVE | {name}")

    def log_chat(self, name: str, message: str):
        """Log chat message."""
        self.info(f"Chat from {name}: {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {name} | {message}")

    def log_operator_message(self, display_name: str, message: str):
        """Log operator broadcast."""
        self.info(f"📢 OPERATOR {display_name}: {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | [OPERATOR] {display_name} | {message}")

    def log_pruned(self, name: str):
        """Log removal of a dead connection from the registry."""
        self.warning(f"Pruned unreachable client {name}")

    def log_heartbeat(self, delivered: int, pruned: int):
        """Log one heartbeat round."""
        self.debug(f"Heartbeat delivered to {delivered} client(s), pruned {pruned}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
