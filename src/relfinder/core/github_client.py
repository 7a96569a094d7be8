"""
Paginated GitHub API client for the cascade levels.

Each cascade level maps to one query shape (user search, owner-scoped
repository search, release listing). Pages are fetched one at a time by an
explicit loop until a short page comes back.

Modified: 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from relfinder.config.settings import MAX_PAGE_SIZE
from relfinder.core.cascade import FetchRequest
from relfinder.core.models import Level
from relfinder.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class PageQuery:
    """
    One paginated endpoint plus its fixed parameters.

    ``payload`` names where the items live in the response body: ``items``
    for the search endpoints, ``list`` for listings that return a bare array.
    """

    operation: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    payload: str = "items"
    max_pages: Optional[int] = None


@dataclass(frozen=True)
class Page:
    """One page of raw items as returned by GitHub."""

    number: int
    items: List[Dict[str, Any]]
    total_count: Optional[int] = None


class GitHubAPIClient:
    """
    Async GitHub REST client used by the cascade controller.

    Failures never raise out of this class: a bad status, a transport error
    or a body without a payload is logged and ends the page chain, which is
    all the cascade needs to clear its loading indicator.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        page_size: int = MAX_PAGE_SIZE,
        search_max_pages: Optional[int] = 10,
        rate_limit_buffer: int = 100,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: OAuth token, sent as a bearer token (may be set later)
            api_url: GitHub API base URL
            page_size: Items requested per page (GitHub maximum is 100)
            search_max_pages: Page cap for the search endpoints (None = no cap)
            rate_limit_buffer: Reserve this many requests before warning
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.page_size = page_size
        self.search_max_pages = search_max_pages
        self.rate_limiter = RateLimiter(buffer=rate_limit_buffer)
        self._client = httpx.AsyncClient(
            base_url=api_url,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        """Arm (or re-arm) bearer authentication for subsequent requests."""
        self._client.headers["Authorization"] = f"Bearer {token}"

    @property
    def is_authenticated(self) -> bool:
        return "Authorization" in self._client.headers

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ==================== Query shapes ====================

    def search_users_query(self, text: str) -> PageQuery:
        """Query for ``GET /search/users`` in ascending order."""
        return PageQuery(
            operation="search_users",
            path="/search/users",
            params={"q": text, "order": "asc"},
            max_pages=self.search_max_pages,
        )

    def search_repos_query(self, owner: str, text: str = "") -> PageQuery:
        """Query for ``GET /search/repositories`` scoped to one owner."""
        q = f"{text} user:{owner}".strip()
        return PageQuery(
            operation="search_repos",
            path="/search/repositories",
            params={"q": q, "order": "asc"},
            max_pages=self.search_max_pages,
        )

    def list_releases_query(self, owner: str, repo: str) -> PageQuery:
        """Query for ``GET /repos/{owner}/{repo}/releases``; exhaustive."""
        return PageQuery(
            operation="list_releases",
            path=f"/repos/{owner}/{repo}/releases",
            payload="list",
        )

    def query_for(self, request: FetchRequest) -> PageQuery:
        """Translate a cascade fetch request into its endpoint query."""
        if request.level is Level.USER:
            return self.search_users_query(request.text)
        if request.level is Level.REPO:
            return self.search_repos_query(request.owner, request.text)
        return self.list_releases_query(request.owner, request.repo)

    # ==================== Pagination ====================

    async def fetch_page(self, query: PageQuery, page: int) -> Optional[Page]:
        """
        Issue one request for ``page`` of ``query``.

        Args:
            query: Endpoint and fixed parameters
            page: 1-based page number

        Returns:
            The page, or None when the request failed or had no payload
        """
        if self.rate_limiter.should_wait():
            logger.warning(
                f"Rate limit exhausted, skipping {query.operation} page {page} "
                f"(resets in {self.rate_limiter.get_wait_time()}s)"
            )
            return None

        params = dict(query.params)
        params["per_page"] = str(self.page_size)
        params["page"] = str(page)

        try:
            response = await self._client.get(query.path, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Request for {query.path} page {page} failed: {e}")
            return None

        self.rate_limiter.track_request()
        self.rate_limiter.update_from_headers(response.headers)
        if self.rate_limiter.should_warn():
            logger.warning(f"GitHub rate limit running low: {self.rate_limiter.format_remaining()}")

        if response.status_code != 200:
            if (
                response.status_code in (403, 429)
                and response.headers.get("X-RateLimit-Remaining") == "0"
            ):
                logger.warning(f"GitHub rate limit exceeded on {query.path}")
            else:
                logger.warning(
                    f"Looks like there was a problem. Status code: {response.status_code} "
                    f"({query.path} page {page})"
                )
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Response for {query.path} page {page} is not JSON")
            return None

        total_count = None
        if query.payload == "list":
            items = data if isinstance(data, list) else None
        else:
            items = data.get("items") if isinstance(data, dict) else None
            if isinstance(data, dict) and isinstance(data.get("total_count"), int):
                total_count = data["total_count"]

        if items is None:
            logger.warning(f"Response for {query.path} page {page} has no data payload")
            return None

        return Page(number=page, items=items, total_count=total_count)

    def has_next_page(self, query: PageQuery, page: Page) -> bool:
        """
        Decide whether another page should be requested after ``page``.

        A full page means more may follow, unless ``total_count`` says the
        pages seen already cover everything or the query's page cap is hit.
        """
        if len(page.items) < self.page_size:
            return False
        if page.total_count is not None and page.number * self.page_size >= page.total_count:
            return False
        if query.max_pages is not None and page.number >= query.max_pages:
            return False
        return True

    async def iter_pages(self, query: PageQuery) -> AsyncIterator[Page]:
        """
        Yield pages of ``query`` in order, one request at a time.

        The next request is issued only after the consumer has handled the
        previous page, so appends always land in request order.
        """
        number = 1
        while True:
            page = await self.fetch_page(query, number)
            if page is None:
                return

            yield page

            if not self.has_next_page(query, page):
                return
            number += 1
