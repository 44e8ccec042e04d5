"""
Async Clockify API client for the time-entry endpoints, with error mapping.
"""
import logging
from typing import Dict, Any, List, Optional
import httpx
from pydantic import ValidationError
from clockbar.utils.timefmt import format_instant
from clockbar.integrations.clockify_types import (
    ClockifyErrorResponse,
    TimeEntry,
    TimeEntryClose,
    TimeEntryCreate,
)
from clockbar.errors import ClockifyAPIError, ClockifyNetworkError

logger = logging.getLogger(__name__)

USER_AGENT = "clockbar/0.1"

_STATUS_CODES = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    429: "rate_limited",
}


def _error_code(status_code: int) -> str:
    if status_code in _STATUS_CODES:
        return _STATUS_CODES[status_code]
    if status_code >= 500:
        return "upstream_error"
    return "api_error"


class ClockifyClient:
    """Async Clockify API client scoped to one workspace, user and project."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        workspace_id: str,
        user_id: str,
        project_id: Optional[str] = None,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.workspace_id = workspace_id
        self.user_id = user_id
        self.project_id = project_id
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings) -> "ClockifyClient":
        return cls(
            api_key=settings.API_TOKEN,
            base_url=settings.BASE_URL,
            workspace_id=settings.WORKSPACE_ID,
            user_id=settings.MY_USER_ID,
            project_id=settings.PROJECT_ID,
            timeout=settings.HTTP_TIMEOUT,
        )

    def _http_client(self) -> httpx.AsyncClient:
        # One attempt per call: no transport retries
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            headers={"User-Agent": USER_AGENT},
            transport=self.transport or httpx.AsyncHTTPTransport(retries=0),
        )

    def _auth_headers(self) -> Dict[str, str]:
        return {"X-Api-Key": self.api_key}

    @property
    def user_entries_path(self) -> str:
        return f"/v1/workspaces/{self.workspace_id}/user/{self.user_id}/time-entries"

    def entry_path(self, entry_id: str) -> str:
        # Updates go through the workspace-level resource, not the user-scoped one.
        return f"/v1/workspaces/{self.workspace_id}/time-entries/{entry_id}"

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json_body: Optional[Any] = None,
    ) -> Any:
        """
        Make a single HTTP request.
        Transport failures become ClockifyNetworkError, anything but 2xx
        becomes ClockifyAPIError carrying the status code.
        """
        url = f"{self.base_url}{path}"
        headers = self._auth_headers()
        headers["Content-Type"] = "application/json"

        try:
            async with self._http_client() as client:
                response = await client.request(
                    method.upper(),
                    url,
                    headers=headers,
                    json=json_body,
                    follow_redirects=True,
                )
        except httpx.TransportError as e:
            logger.warning(f"Clockify {operation} failed before a response: {e!r}")
            raise ClockifyNetworkError(
                f"Network error while {operation}: {e}", e
            ) from e

        if not response.is_success:
            raise self._api_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise ClockifyAPIError(
                "invalid_response",
                "Failed to parse API response",
                response.status_code,
            ) from e

    def _api_error(self, response: httpx.Response) -> ClockifyAPIError:
        body: Any = None
        error = ClockifyErrorResponse()
        try:
            body = response.json()
            if isinstance(body, dict):
                error = ClockifyErrorResponse.model_validate(body)
        except (ValueError, ValidationError):
            # Non-JSON or unexpected shape; fall back to the status line
            if isinstance(body, dict) and isinstance(body.get("message"), str):
                error = ClockifyErrorResponse(message=body["message"])

        message = error.message or response.reason_phrase or "API request failed"
        logger.warning(
            f"Clockify responded {response.status_code}: {message}",
            extra={"status": response.status_code},
        )
        return ClockifyAPIError(
            _error_code(response.status_code),
            message,
            response.status_code,
            body if body is not None else response.text,
        )

    async def get_time_entries(self) -> List[TimeEntry]:
        """List the user's time entries (first page only)."""
        data = await self._request("fetching time entries", "GET", self.user_entries_path)
        return [TimeEntry(**e) for e in data]

    async def clock_in(self) -> TimeEntry:
        """Start a running time entry on the configured project."""
        body = TimeEntryCreate(start=format_instant(), projectId=self.project_id)
        data = await self._request(
            "clocking in",
            "POST",
            self.user_entries_path,
            json_body=body.model_dump(exclude_none=True),
        )
        return TimeEntry(**data)

    async def clock_out(self) -> TimeEntry:
        """Stop the running time entry."""
        entries = await self.get_time_entries()
        active = next((e for e in entries if e.timeInterval.is_open), None)
        if active is None:
            raise ClockifyAPIError(
                "no_active_entry",
                "No active time entry found to clock out",
                404,
            )

        body = TimeEntryClose(end=format_instant())
        data = await self._request(
            "clocking out",
            "PATCH",
            self.entry_path(active.id),
            json_body=body.model_dump(),
        )
        return TimeEntry(**data)
