# src/guildflow/core/__init__.py
"""Core infrastructure: configuration, logging, the workflow graph, resource
catalog, local resource store, attachments, and document persistence."""
