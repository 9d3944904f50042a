"""
Configuration management for the file store.

Contains the Pydantic settings class read once at startup: listen address,
upload size limit, and which storage backend holds the files.
"""
