"""Index of remote documents keyed by title."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .api import OutlineClient
from .models import RemoteDocument

logger = logging.getLogger(__name__)


class DocumentIndex(Mapping[str, RemoteDocument]):
    """Read-only mapping from document title to document.

    The title is the identity key: the path of the local file the document
    was created from. A renamed file therefore shows up as a new document
    plus an orphaned old one, never as a move.

    An index is built from exactly one full listing pass and is never
    updated afterwards.
    """

    def __init__(self, documents: Iterable[RemoteDocument] = ()):
        """Build the index from a listing.

        If the listing contains the same title more than once, the later
        document wins. Titles are not validated for uniqueness.

        Args:
            documents: Documents in listing order
        """
        entries: dict[str, RemoteDocument] = {}
        duplicates = 0
        for document in documents:
            if document.title in entries:
                duplicates += 1
                logger.warning(
                    f"Duplicate title {document.title!r}: "
                    f"{entries[document.title].id} replaced by {document.id}"
                )
            entries[document.title] = document
        self._entries = MappingProxyType(entries)
        self.duplicates = duplicates

    def __getitem__(self, title: str) -> RemoteDocument:
        return self._entries[title]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DocumentIndex({len(self)} documents)"


def build_document_index(client: OutlineClient, collection_id: str) -> DocumentIndex:
    """Fetch every document of a collection and index it by title.

    Args:
        client: API client
        collection_id: Collection to index

    Returns:
        DocumentIndex for the collection
    """
    logger.info(f"Building document index for collection {collection_id}")
    index = DocumentIndex(client.list_documents(collection_id))
    logger.info(f"Found {len(index)} existing documents in collection")
    return index
