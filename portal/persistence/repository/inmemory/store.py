"""Process-wide state backing the in-memory repositories."""

from portal.domain.model import ContentItem, Course, MetadataOption


class InMemoryStore:
    """Rows shared by every in-memory repository built on it.

    Repositories are created per request; the store lives as long as the
    container, so data written by one request is visible to the next.
    """

    def __init__(self) -> None:
        self.options: dict[str, MetadataOption] = {}
        self.courses: dict[str, Course] = {}
        self.content_items: dict[str, ContentItem] = {}

    def clear(self) -> None:
        self.options.clear()
        self.courses.clear()
        self.content_items.clear()
