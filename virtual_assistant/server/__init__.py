"""
HTTP backend for the assistant.
"""

from virtual_assistant.server.app import create_app, run_server

__all__ = ["create_app", "run_server"]
