"""Business logic layer for uploads app.

This package contains the upload lifecycle:
- Ingest: validate, name and store one uploaded file
- Retention: sweep the storage root for expired files
- Policy objects built from settings

All business logic should be implemented here, separate from
views (HTTP layer) and infrastructure (filesystem).
"""
