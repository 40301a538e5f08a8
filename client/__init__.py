"""
Client package for the LAN Broadcast Chat system.

Contains the line-oriented chat client and its terminal front end.
"""
