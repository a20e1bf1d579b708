"""
Establishment ingestion package.

Responsibilities:
- Read a raw establishment export from the application database.
- Decode its JSON-encoded columns and normalise them into the canonical Venue schema.
- Persist the processed venue file consumed by the search repository.
"""
