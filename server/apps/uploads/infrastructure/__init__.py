"""Infrastructure layer for uploads app.

This package contains integrations with external systems:
- Local filesystem storage backend
- Stored-name generation and client filename sanitizing
- Streaming guard for Django's multipart upload parser

Keep infrastructure concerns separate from business logic.
"""
