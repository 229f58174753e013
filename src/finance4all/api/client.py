"""
GraphQL client for the Finance4All backend.

Requests pass through error logging, then auth header injection, then
HTTP. Responses that carry errors are logged and still returned with
whatever partial data came back.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from finance4all.auth.session import AuthSession
from finance4all.config import Settings

logger = logging.getLogger(__name__)


class GraphQLResult(BaseModel):
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class GraphQLClient:
    """Executes GraphQL operations against ``<backend_url>/graphql``."""

    def __init__(
        self,
        endpoint: str,
        session: Optional[AuthSession] = None,
        timeout: float = 30.0,
        log_requests: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            endpoint: Full GraphQL endpoint URL
            session: Auth session supplying the bearer token, if signed in
            timeout: Request timeout in seconds
            log_requests: Log every operation name at DEBUG level
            transport: Optional httpx transport (used by tests)
        """
        self.endpoint = endpoint
        self.session = session
        self.log_requests = log_requests
        self.client = httpx.Client(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: Optional[AuthSession] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "GraphQLClient":
        return cls(
            settings.graphql_endpoint,
            session=session,
            timeout=settings.api_timeout_seconds,
            log_requests=settings.enable_api_logging,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "GraphQLClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> GraphQLResult:
        """
        Run a query or mutation.

        Raises:
            httpx.HTTPError: On transport failures (logged first)
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        if operation_name:
            payload["operationName"] = operation_name

        if self.log_requests:
            logger.debug(f"GraphQL request: {operation_name or 'anonymous'}")

        try:
            response = self.client.post(
                self.endpoint, json=payload, headers=self._auth_headers()
            )
            # GraphQL servers report query errors in the body, often with a 4xx status
            if response.is_server_error:
                response.raise_for_status()
            body = response.json()
            result = GraphQLResult(data=body.get("data"), errors=body.get("errors") or [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[Network error]: {e}")
            raise

        self._log_errors(result)
        return result

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.id_token if self.session else None
        return {"authorization": f"Bearer {token}"} if token else {}

    @staticmethod
    def _log_errors(result: GraphQLResult) -> None:
        for error in result.errors:
            logger.error(
                f"[GraphQL error]: Message: {error.get('message')}, "
                f"Location: {error.get('locations')}, Path: {error.get('path')}"
            )
            if (error.get("extensions") or {}).get("code") == "UNAUTHENTICATED":
                logger.error("Authentication error - user may need to log in again")
