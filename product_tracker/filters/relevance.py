# product_tracker/filters/relevance.py

"""Deterministic title-similarity ranking of listings."""

from product_tracker.models.listing import Listing


class RelevanceRanker:
    """Score and order listings by how closely the title matches the query."""

    @staticmethod
    def score(title: str, query: str) -> float:
        """Return the relevance of *title* to *query*.

        2 points when the lower-cased title contains the lower-cased
        query, plus up to 1 point that shrinks linearly with the
        difference in length.  An empty title scores 0.
        """
        if not title:
            return 0.0

        norm_title = title.lower()
        norm_query = query.lower()
        score = 2.0 if norm_query in norm_title else 0.0

        length_diff = abs(len(norm_title) - len(norm_query))
        score += max(0.0, 1 - length_diff / max(len(norm_query), 1))
        return score

    @staticmethod
    def rank(listings: list[Listing], query: str) -> list[Listing]:
        """Return *listings* sorted by descending score, stable on ties."""
        return sorted(
            listings,
            key=lambda listing: RelevanceRanker.score(listing.title, query),
            reverse=True,
        )
