"""
Envie search service.

Turns a free-text desire ("faire du kart ce soir") into a ranked,
paginated, geo-filtered list of venues.
"""
