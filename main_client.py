#!/usr/bin/env python3
"""
LAN Broadcast Chat Client - Main Entry Point

Usage:
    python main_client.py --name Alice

Optional arguments:
    --host HOST          Server address (default: localhost)
    --port PORT          Server TCP port (default: 7100)
    --name NAME          Display name
    --show-heartbeats    Print HEARTBEAT lines from the server
"""

if __name__ == "__main__":
    import sys

    from client.main_client import main

    sys.exit(main())
