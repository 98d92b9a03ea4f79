"""HTTP client for the Redmine REST API.

Wraps an ``httpx.Client`` bound to the server URL. All JSON endpoints used by
the CLI live here; everything above this module works with models.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from redmine_cli import __version__
from redmine_cli.errors import ConfigError, RedmineAPIError, RedmineConnectionError
from redmine_cli.logging import get_logger
from redmine_cli.models import Issue, IssueBody, Membership, NamedResource

if TYPE_CHECKING:
    from redmine_cli.config import Settings

logger = get_logger(__name__)

PAGE_SIZE = 100
API_KEY_HEADER = "X-Redmine-API-Key"


class RedmineClient:
    """Client for a single Redmine server and (optionally) project."""

    def __init__(
        self,
        server: str,
        api_key: str | None = None,
        project: str | None = None,
        verify: bool = True,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            server: Base URL of the Redmine server.
            api_key: API key sent with every request, if any.
            project: Project identifier for project-scoped calls.
            verify: Verify the server's TLS certificate.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.server = server.rstrip("/")
        self.project = project

        headers = {"User-Agent": f"redmine-cli/{__version__}", "Accept": "application/json"}
        if api_key:
            headers[API_KEY_HEADER] = api_key

        self._http = httpx.Client(
            base_url=self.server,
            headers=headers,
            verify=verify,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> "RedmineClient":
        """Create a client from loaded settings.

        Raises:
            ConfigError: If no server is configured.
        """
        if not settings.server:
            raise ConfigError("Please specify server")
        return cls(
            server=settings.server,
            api_key=settings.api_key,
            project=settings.project,
            verify=not settings.skip_certificate_validation,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    def __enter__(self) -> "RedmineClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _project_path(self) -> str:
        if not self.project:
            raise ConfigError("Please specify project")
        return f"/projects/{self.project}"

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise on transport failures and error statuses."""
        logger.debug(method.lower(), url=f"{self.server}{path}", params=kwargs.get("params"))
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RedmineConnectionError(f"Could not reach {self.server}: {e}") from e

        logger.debug("response status", status_code=response.status_code)
        if response.status_code >= 400:
            logger.debug("response text", text=response.text)
            raise RedmineAPIError(response.status_code, response.text, url=str(response.url))
        return response

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise RedmineAPIError(response.status_code, f"Invalid JSON: {e}") from e

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a JSON document.

        Args:
            path: Path relative to the server, e.g. ``/trackers.json``.
            params: Optional query parameters.

        Returns:
            The decoded JSON body.
        """
        return self._json(self._request("GET", path, params=params))

    def fetch_all(self, path: str, key: str, page_size: int = PAGE_SIZE) -> list[dict[str, Any]]:
        """Fetch every page of a paginated collection.

        Args:
            path: Collection path, e.g. ``/projects/foo/issues.json``.
            key: Key of the item list in each page, e.g. ``issues``.
            page_size: Items requested per page.

        Returns:
            All items, in server order.
        """
        offset = 0
        items: list[dict[str, Any]] = []
        while True:
            body = self.get(path, params={"limit": page_size, "offset": offset})
            items.extend(body.get(key) or [])
            offset += page_size
            total_count = body.get("total_count", 0)
            logger.debug("body.total_count", total_count=total_count, fetched=len(items))
            if total_count <= offset:
                break
        return items

    def get_project(self) -> NamedResource:
        """Return the configured project."""
        body = self.get(f"{self._project_path()}.json")
        return NamedResource.model_validate(body["project"])

    def list_issues(self) -> list[Issue]:
        """Return every issue of the configured project."""
        items = self.fetch_all(f"{self._project_path()}/issues.json", "issues")
        return [Issue.model_validate(item) for item in items]

    def get_issue(self, issue_id: int) -> Issue:
        """Return a single issue."""
        body = self.get(f"/issues/{issue_id}.json")
        return Issue.model_validate(body["issue"])

    def list_trackers(self) -> list[NamedResource]:
        body = self.get("/trackers.json")
        return [NamedResource.model_validate(t) for t in body.get("trackers", [])]

    def list_statuses(self) -> list[NamedResource]:
        body = self.get("/issue_statuses.json")
        return [NamedResource.model_validate(s) for s in body.get("issue_statuses", [])]

    def list_versions(self) -> list[NamedResource]:
        body = self.get(f"{self._project_path()}/versions.json")
        return [NamedResource.model_validate(v) for v in body.get("versions", [])]

    def list_memberships(self) -> list[Membership]:
        body = self.get(f"{self._project_path()}/memberships.json")
        return [Membership.model_validate(m) for m in body.get("memberships", [])]

    def create_issue(self, body: IssueBody) -> int:
        """Create an issue in the configured project.

        Returns:
            The id of the new issue.

        Raises:
            RedmineAPIError: If the server does not answer 201 Created.
        """
        payload = body.to_payload()
        logger.debug("new body", body=payload)
        response = self._request("POST", f"{self._project_path()}/issues.json", json=payload)
        if response.status_code != 201:
            raise RedmineAPIError(response.status_code, response.text, url=str(response.url))
        return self._json(response)["issue"]["id"]

    def update_issue(self, issue_id: int, body: IssueBody) -> None:
        """Update the given fields of an issue."""
        payload = body.to_payload()
        logger.debug("body", body=payload)
        self._request("PUT", f"/issues/{issue_id}.json", json=payload)


__all__ = ["RedmineClient", "PAGE_SIZE", "API_KEY_HEADER"]
