"""
FastAPI REST service for the Book catalogue.

This package provides:
- CRUD endpoints for books stored in MongoDB
- A compound create-then-delete endpoint
- Request logging and file-based error logging
"""
