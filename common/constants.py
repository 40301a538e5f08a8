"""
Shared constants for the LAN Broadcast Chat system.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 7100
LISTEN_BACKLOG = 50
ACCEPT_RETRY_DELAY = 0.1  # seconds to back off after a failed accept

# Text encoding
ENCODING = 'utf-8'
LINE_TERMINATOR = '\n'
MAX_LINE_LENGTH = 64 * 1024  # StreamReader limit per line

# Heartbeat
HEARTBEAT_INTERVAL = 5  # seconds
HEARTBEAT_TIMEOUT = 10  # seconds, carried in config but not enforced

# Client reconnect
MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_BASE = 1.0

# Names
DEFAULT_CLIENT_NAME = 'Anonymous'
DEFAULT_OPERATOR_NAME = 'Server'
UNAVAILABLE_IP = 'Unavailable'

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'


# Protocol lines
class ProtocolLines:
    # Server to Client
    NAME_PROMPT = 'Please enter your name:'
    HEARTBEAT = 'HEARTBEAT'
    SHUTTING_DOWN = 'Server is shutting down...'
    SHUT_DOWN = 'Server shut down.'
    JOIN_SUFFIX = ' has joined the chat.'
    LEAVE_SUFFIX = ' has left the chat.'

    # Client to Server
    DISCONNECT = 'DISCONNECT'
    DISCONNECT_PREFIX = 'DISCONNECT '


# Operator console commands
class ConsoleCommands:
    QUIT = '/quit'
    WHO = '/who'
