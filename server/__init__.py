"""
Server package for the LAN Broadcast Chat system.

This package contains all server-side functionality including:
- Connection accept loop and per-client sessions
- Client registry and line broadcasting
- Heartbeat liveness probing
- Server lifecycle, configuration and utilities
"""
