"""
FastAPI RESTful API for the Book Collection service.

This module provides a JSON HTTP API for:
- Listing, creating, updating and deleting books
- Persisting the collection as a single JSON document
- Permissive CORS for browser clients
"""
