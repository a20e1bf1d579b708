from __future__ import annotations

MISSING_ENVIE_MESSAGE = "Paramètre 'envie' requis"
NO_KEYWORDS_MESSAGE = "Aucun mot-clé significatif trouvé"
SEARCH_FAILED_MESSAGE = "Erreur lors de la recherche"
INVALID_PARAMETERS_MESSAGE = "Paramètres de recherche invalides"


class SearchError(Exception):
    """Base class for every error raised by the search engine."""


class ValidationError(SearchError):
    """The query cannot be searched (missing envie, no significant keyword)."""


class GeocodingError(SearchError):
    """A place name could not be resolved to coordinates."""


class RepositoryError(SearchError):
    """The venue repository failed to return candidates."""


class SearchCancelled(SearchError):
    """The caller cancelled the search before candidates were fetched."""
