"""
Common package for the LAN Broadcast Chat system.

Holds the constants and line-protocol helpers shared by server and client.
"""
