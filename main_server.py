#!/usr/bin/env python3
"""
LAN Broadcast Chat Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST                 Bind address (default: 0.0.0.0)
    --port PORT                 TCP port (default: 7100)
    --heartbeat-interval SECS   Seconds between heartbeats (default: 5)
    --name NAME                 Display name for operator messages
    --no-echo                   Do not echo chat lines back to their sender
    --debug                     Enable debug logging

Lines typed on the console are broadcast to every client; /who lists who
is online and /quit stops the server.
"""

if __name__ == "__main__":
    import sys

    from server.main_server import main

    sys.exit(main())
