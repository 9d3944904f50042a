"""
A small HTTP file store.

Clients upload a named file, list the stored names, and delete a file by
name. Files live in a flat storage backend (a local directory by default).
"""
