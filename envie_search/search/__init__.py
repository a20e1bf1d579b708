"""
Intent-based venue search engine.

Responsibilities:
- Extract and classify keywords from a free-text envie.
- Resolve the reference point and keep venues inside the search radius.
- Score venues on tags, name, description, activities and opening status.
- Apply the requested sort strategy and paginate the relevant venues.
"""
