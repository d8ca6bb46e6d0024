"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every endpoint uses (settings, DB pool,
response envelope, timestamps, logging). Feature-specific SQL and logic stay in
the feature packages (`public/`, `keys/`).
"""
