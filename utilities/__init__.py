"""
Shared utilities for the Book API.
"""
