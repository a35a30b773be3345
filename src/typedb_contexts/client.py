"""Async HTTP client for the TypeDB HTTP API."""

from typing import Any, Literal

import httpx
import structlog

from .config import Settings, get_settings

logger = structlog.get_logger()

TransactionType = Literal["read", "write", "schema"]


class TypeDBAPIError(Exception):
    """API error with status code and details."""

    def __init__(self, status_code: int, message: str, details: dict | None = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{status_code}] {message}")


class TypeDBClient:
    """
    HTTP client for a TypeDB server.

    Signs in lazily on the first request and once more if the server
    rejects the token with 401.

    Usage:
        async with TypeDBClient("http://localhost:8000", "admin", "password") as client:
            await client.create_database("learn_s1")
    """

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._token: str | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.url,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._token = None

    async def __aenter__(self) -> "TypeDBClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response, raising error if not successful."""
        logger.debug(
            "typedb_response",
            method=response.request.method,
            path=response.request.url.path,
            status_code=response.status_code,
        )

        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = error_data.get("message", error_data.get("detail", str(response.text)))
                details = {k: v for k, v in error_data.items() if k not in ("message", "detail")}
            except Exception:
                message = response.text or f"HTTP {response.status_code}"
                details = {}

            raise TypeDBAPIError(response.status_code, message, details)

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError:
            return {}

    async def signin(self) -> str:
        """Exchange credentials for a bearer token."""
        response = await self.client.post(
            "/v1/signin",
            json={"username": self.username, "password": self.password},
        )
        data = self._handle_response(response)
        token = data.get("token")
        if not token:
            raise TypeDBAPIError(response.status_code, "Sign-in response did not contain a token")
        self._token = token
        logger.debug("typedb_signed_in", url=self.url, username=self.username)
        return token

    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict | None = None,
    ) -> dict[str, Any]:
        if self._token is None:
            await self.signin()

        response = await self.client.request(
            method, path, json=json_data, headers={"Authorization": f"Bearer {self._token}"}
        )
        if response.status_code == 401:
            logger.debug("typedb_token_rejected", path=path)
            await self.signin()
            response = await self.client.request(
                method, path, json=json_data, headers={"Authorization": f"Bearer {self._token}"}
            )

        return self._handle_response(response)

    # ========================================
    # Database operations
    # ========================================

    async def list_databases(self) -> list[str]:
        """Names of all databases on the server."""
        data = await self._request("GET", "/v1/databases")
        return [db["name"] for db in data.get("databases", [])]

    async def create_database(self, name: str) -> None:
        await self._request("POST", f"/v1/databases/{name}")

    async def delete_database(self, name: str) -> None:
        await self._request("DELETE", f"/v1/databases/{name}")

    async def query(
        self,
        database: str,
        query: str,
        transaction_type: TransactionType = "read",
    ) -> dict[str, Any]:
        """Run one query in its own transaction, committing schema and write queries."""
        return await self._request(
            "POST",
            "/v1/query",
            {
                "databaseName": database,
                "transactionType": transaction_type,
                "query": query,
                "commit": transaction_type != "read",
            },
        )


def get_client(settings: Settings | None = None) -> TypeDBClient:
    """Get a client configured from settings."""
    settings = settings or get_settings()
    if not settings.typedb_url:
        raise ValueError(
            "TypeDB URL not configured. Use: typedb-contexts config set typedb_url <url>"
        )
    return TypeDBClient(
        settings.typedb_url,
        settings.username,
        settings.password,
        timeout=settings.request_timeout,
    )
