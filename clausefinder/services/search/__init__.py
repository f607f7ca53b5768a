"""Query-time retrieval: fan-out, rank fusion, graph expansion and filtering."""

from clausefinder.services.search.coordinator import SearchCoordinator
from clausefinder.services.search.filters import apply_filters, passes_filters
from clausefinder.services.search.fusion import FusedCandidate, ReciprocalRankFusion

__all__ = [
    "FusedCandidate",
    "ReciprocalRankFusion",
    "SearchCoordinator",
    "apply_filters",
    "passes_filters",
]
