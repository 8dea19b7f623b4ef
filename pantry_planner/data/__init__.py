"""
Data models and SQLite storage.
"""
