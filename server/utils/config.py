"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT,
    MAX_LINE_LENGTH, ACCEPT_RETRY_DELAY, LISTEN_BACKLOG, LOG_DIR,
    DEFAULT_OPERATOR_NAME
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 heartbeat_interval: float = HEARTBEAT_INTERVAL, echo_to_sender: bool = True,
                 operator_name: str = DEFAULT_OPERATOR_NAME, logs_dir: str = LOG_DIR):
        self.host = host
        self.port = port

        # Logging configuration
        self.logs_dir = logs_dir

        # Connection settings
        self.backlog = LISTEN_BACKLOG
        self.max_line_length = MAX_LINE_LENGTH
        self.accept_retry_delay = ACCEPT_RETRY_DELAY

        # Heartbeat settings
        self.heartbeat_interval = heartbeat_interval
        self.heartbeat_timeout = HEARTBEAT_TIMEOUT  # not enforced, see HeartbeatMonitor

        # Chat settings
        self.echo_to_sender = echo_to_sender
        self.operator_name = operator_name or DEFAULT_OPERATOR_NAME

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_heartbeat_settings(self):
        """Get heartbeat settings."""
        return {
            'interval': self.heartbeat_interval,
            'timeout': self.heartbeat_timeout
        }

    def get_log_settings(self):
        """Get logging settings."""
        return {
            'logs_dir': self.logs_dir
        }
