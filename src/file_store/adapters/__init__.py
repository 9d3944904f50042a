"""
Adapter layer for the file store.

Contains the storage backends (local directory, in-memory, S3) behind one
abstract interface, and the factory that picks one from settings.
"""
