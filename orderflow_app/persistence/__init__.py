"""
Persistence module.

Key-value store contract with in-memory and SQLite backends, and the session
store that serializes session records through it.
"""
