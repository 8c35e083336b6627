"""
Guildflow: provisioning workflows for chat-platform guilds.

Workflows are authored once as a graph of action nodes and replayed
against a concrete session, one node at a time.
"""

__version__ = "0.1.0"
