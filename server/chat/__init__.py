"""
Chat module for server-side messaging functionality.

Handles:
- Accepting connections and the name handshake
- Tracking who is online
- Broadcasting lines and pruning dead clients
- Periodic heartbeats
"""
