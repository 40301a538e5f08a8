"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import DEFAULT_HOST, DEFAULT_PORT, MAX_RETRY_ATTEMPTS, RETRY_DELAY_BASE


class ClientConfig:
    """Client configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, username: str = None):
        self.host = host
        self.port = port
        self.username = username or f"user_{id(self) % 10000}"

        # Connection settings
        self.connect_retries = MAX_RETRY_ATTEMPTS
        self.retry_delay = RETRY_DELAY_BASE

        # Display settings
        self.show_heartbeats = False

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username
        }
