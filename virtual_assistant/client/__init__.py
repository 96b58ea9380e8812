"""
Client for the assistant backend.
"""

from virtual_assistant.client.remote import AssistantClient, ClientConfig, ClientError

__all__ = ["AssistantClient", "ClientConfig", "ClientError"]
