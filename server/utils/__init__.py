"""Server configuration, logging and network helpers."""
