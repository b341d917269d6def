"""
Local search over a fetched record collection.

The admin API has no server-side search, so every screen filters its full
working collection in memory. Filtering is a pure function of
(collection, query): it never mutates the input and keeps the original
record order.
"""

from typing import Callable, Generic, List, Optional, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


def parse_threshold(query: str) -> Optional[int]:
    """Return the query as an integer if it is purely numeric, else None."""
    query = query.strip()
    if query.isdigit():
        return int(query)
    return None


def filter_items(items: Sequence[T],
                 query: str,
                 searchable_text_extractor: Callable[[T], str],
                 threshold_matcher: Optional[Callable[[T, int], bool]] = None) -> List[T]:
    """
    Return the items whose searchable text contains ``query``, ignoring case.

    An empty (or whitespace-only) query returns every item. When
    ``threshold_matcher`` is given and the query is a whole number, items
    are matched with it instead of by text.
    """
    query = query.strip()
    if not query:
        return list(items)

    if threshold_matcher is not None:
        threshold = parse_threshold(query)
        if threshold is not None:
            return [item for item in items if threshold_matcher(item, threshold)]

    query_lower = query.lower()
    return [
        item for item in items
        if query_lower in searchable_text_extractor(item).lower()
    ]


class SearchService(Generic[T]):
    """
    Holds a collection and the result of the last query against it.

    Usage:
        service = SearchService(records, config.searchable_text)
        visible = service.filter("pending")
        service.update_items(refetched)   # re-applies the current query
    """

    def __init__(self,
                 all_items: Sequence[T],
                 searchable_text_extractor: Callable[[T], str],
                 threshold_matcher: Optional[Callable[[T, int], bool]] = None):
        """
        Initialize search service.

        Args:
            all_items: Records in server order
            searchable_text_extractor: Function to extract searchable text from an item
            threshold_matcher: Optional numeric-query predicate (e.g. score >= n)
        """
        self.all_items: List[T] = list(all_items)
        self.searchable_text_extractor = searchable_text_extractor
        self.threshold_matcher = threshold_matcher
        self.query = ""
        self.filtered_items: List[T] = list(self.all_items)

    def filter(self, search_term: str) -> List[T]:
        """Apply ``search_term`` and return the matching items."""
        self.query = search_term
        self.filtered_items = filter_items(
            self.all_items, search_term,
            self.searchable_text_extractor, self.threshold_matcher,
        )
        logger.debug(f"Search '{search_term}': {len(self.filtered_items)}/{len(self.all_items)} items")
        return self.filtered_items

    def reset(self) -> List[T]:
        """Clear the query and show all items."""
        return self.filter("")

    def update_items(self, new_items: Sequence[T]) -> List[T]:
        """Replace the collection and re-apply the current query."""
        self.all_items = list(new_items)
        return self.filter(self.query)
