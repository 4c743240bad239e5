"""API client for Outline-compatible document services."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import Any, Callable

import httpx

from .exceptions import (
    OutlineAPIError,
    OutlineConfigError,
    OutlineInvalidResponseError,
    OutlineNetworkError,
    OutlineRateLimitError,
)
from .models import RemoteDocument
from .retry import AttemptResult, run_with_retry
from .utils import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
)

logger = logging.getLogger(__name__)


def _data(response: Any) -> Any:
    """Extract the ``data`` member of a response envelope."""
    if isinstance(response, dict):
        return response.get("data")
    return None


class OutlineClient:
    """Client for the document endpoints of the Outline API.

    Every endpoint is a JSON ``POST`` to ``{base_url}/api/<endpoint>``
    authorized with a bearer token.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the API client.

        Args:
            api_key: API key sent as bearer token
            base_url: Base URL of the service (trailing slash is ignored)
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (used by tests)
            sleep: Function used to wait between retries
        """
        if not api_key:
            raise OutlineConfigError("OUTLINE_API_KEY is required")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> OutlineClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _attempt(self, url: str, payload: dict[str, Any]) -> AttemptResult:
        """Issue a single request and classify the result.

        Args:
            url: Full endpoint URL
            payload: JSON request body

        Returns:
            AttemptResult describing success, a retryable or a permanent failure
        """
        try:
            response = self._get_client().post(url, json=payload)
        except httpx.TransportError as e:
            return AttemptResult.retryable(OutlineNetworkError(str(e) or repr(e)))

        status_code = response.status_code
        if status_code == 429:
            return AttemptResult.retryable(
                OutlineRateLimitError("Rate limited (HTTP 429)")
            )

        if not 200 <= status_code < 300:
            body = response.text
            return AttemptResult.permanent(
                OutlineAPIError(
                    f"API error {status_code}: {body}",
                    status_code=status_code,
                    body=body,
                )
            )

        if not response.content:
            return AttemptResult.success({})

        try:
            return AttemptResult.success(response.json())
        except ValueError:
            return AttemptResult.permanent(
                OutlineInvalidResponseError(
                    "Invalid JSON response from server",
                    status_code=status_code,
                    body=response.text,
                )
            )

    def _request(self, endpoint: str, payload: dict[str, Any] | None = None) -> Any:
        """Make an API request with retry logic.

        Rate limits (429) and transport errors are retried with exponential
        backoff. Any other non-2xx response fails immediately.

        Args:
            endpoint: Endpoint name (e.g. ``documents.list``)
            payload: JSON request body

        Returns:
            Parsed response JSON

        Raises:
            OutlineRateLimitError: Still rate limited after all retries
            OutlineNetworkError: Transport failure after all retries
            OutlineAPIError: Non-2xx, non-429 response
        """
        url = f"{self.base_url}/api/{endpoint}"
        body = payload or {}
        return run_with_retry(
            lambda: self._attempt(url, body),
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
            sleep=self._sleep,
            description=endpoint,
        )

    # =========================
    # Document Operations
    # =========================

    def iter_document_pages(
        self, collection_id: str, limit: int = DEFAULT_PAGE_SIZE
    ) -> Iterator[list[RemoteDocument]]:
        """Lazily fetch the documents of a collection page by page.

        Paging stops at the first empty page or the first page shorter
        than ``limit``.

        Args:
            collection_id: Collection to list
            limit: Page size

        Yields:
            Non-empty lists of RemoteDocument
        """
        offset = 0
        while True:
            response = self._request(
                "documents.list",
                {"collectionId": collection_id, "limit": limit, "offset": offset},
            )
            data = _data(response) or []
            if not data:
                return

            yield [RemoteDocument.from_api_response(item) for item in data]

            if len(data) < limit:
                return
            offset += limit

    def list_documents(
        self, collection_id: str, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteDocument]:
        """List all documents in a collection (handles pagination).

        Args:
            collection_id: Collection to list
            limit: Page size

        Returns:
            All documents in listing order (empty for an empty collection)
        """
        documents: list[RemoteDocument] = []
        for page in self.iter_document_pages(collection_id, limit=limit):
            documents.extend(page)
        return documents

    def search_titles(self, query: str, collection_id: str) -> list[RemoteDocument]:
        """Search documents by title in a collection.

        Args:
            query: Title search query
            collection_id: Collection to search in

        Returns:
            Candidate matches (may be fuzzy)
        """
        response = self._request(
            "documents.search_titles",
            {"query": query, "collectionId": collection_id},
        )
        return [
            RemoteDocument.from_api_response(item)
            for item in _data(response) or []
        ]

    def find_by_title(self, title: str, collection_id: str) -> RemoteDocument | None:
        """Find a document by exact title match.

        Args:
            title: Exact title to look for
            collection_id: Collection to search in

        Returns:
            The first document whose title equals ``title``, or None
        """
        for document in self.search_titles(title, collection_id):
            if document.title == title:
                return document
        return None

    def create_document(
        self,
        title: str,
        text: str,
        collection_id: str,
        publish: bool = True,
    ) -> RemoteDocument | None:
        """Create a new document.

        Args:
            title: Document title
            text: Document content (markdown)
            collection_id: Collection to create the document in
            publish: Publish the document immediately (default: True)

        Returns:
            The created document, if the response includes it
        """
        response = self._request(
            "documents.create",
            {
                "title": title,
                "text": text,
                "collectionId": collection_id,
                "publish": publish,
            },
        )
        data = _data(response)
        return RemoteDocument.from_api_response(data) if data else None

    def update_document(
        self, document_id: str, title: str, text: str
    ) -> RemoteDocument | None:
        """Update an existing document.

        Args:
            document_id: ID of the document to update
            title: New title
            text: New content

        Returns:
            The updated document, if the response includes it
        """
        response = self._request(
            "documents.update",
            {"id": document_id, "title": title, "text": text},
        )
        data = _data(response)
        return RemoteDocument.from_api_response(data) if data else None

    def delete_document(self, document_id: str) -> None:
        """Delete a document.

        Args:
            document_id: ID of the document to delete
        """
        self._request("documents.delete", {"id": document_id})
