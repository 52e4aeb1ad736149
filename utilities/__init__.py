"""
Shared utilities for the Book Collection service.
"""
