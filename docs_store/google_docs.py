"""
Google Docs document store over the Drive v3 REST API.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from settings import (
    DRIVE_API_BASE,
    DRIVE_UPLOAD_BASE,
    GOOGLE_DOC_MIME_TYPE,
    OAUTH_CALLBACK_HOST,
    OAUTH_CALLBACK_PORT,
    OAUTH_CALLBACK_TIMEOUT,
    REQUEST_TIMEOUT,
    SCOPES,
)
from google_oauth import (
    AuthorizationFlow,
    OAuthCallbackServer,
    TokenSet,
    create_authorization_flow,
    create_state,
    exchange_code_for_tokens,
    parse_client_config,
    refresh_access_token,
    start_callback_server,
)
from docsync.errors import AuthFailedError, RemoteStoreError
from .base import DocumentStore, NewTokenRequest
from .conversion import append_html, markdown_to_html
from .credential import AuthorizedClient

logger = logging.getLogger(__name__)

COMMENTS_PAGE_SIZE = 100


def escape_query_value(value: str) -> str:
    """Escape a string literal for a Drive ``q`` expression"""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDocsStore(DocumentStore):
    """
    Google Docs store.

    Documents are looked up by exact title within an optional folder,
    comments are read through the Drive comments API and content is written
    as an HTML media upload, which Drive converts into the Doc's body.
    """

    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        scopes: Sequence[str] = SCOPES,
        callback_host: str = OAUTH_CALLBACK_HOST,
        callback_port: int = OAUTH_CALLBACK_PORT,
        callback_timeout: float = OAUTH_CALLBACK_TIMEOUT,
    ):
        """
        Args:
            http: Shared HTTP client (created lazily when omitted)
            scopes: OAuth scopes requested and required of cached tokens
            callback_host: Interface for the loopback redirect listener
            callback_port: Port for the listener (0 for ephemeral)
            callback_timeout: Seconds to wait for the browser round-trip
        """
        self._http = http
        self._owns_http = http is None
        self.scopes = list(scopes)
        self.callback_host = callback_host
        self.callback_port = callback_port
        self.callback_timeout = callback_timeout

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
        return self._http

    async def aclose(self) -> None:
        """Close the HTTP client if this store created it"""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "GoogleDocsStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # Authorization

    def get_client(self, credentials_blob: str) -> AuthorizedClient:
        return AuthorizedClient(parse_client_config(credentials_blob))

    async def has_valid_token(self, client: AuthorizedClient, tokens: Optional[Dict[str, Any]]) -> bool:
        if not tokens or not isinstance(tokens, dict):
            return False

        try:
            token_set = TokenSet.from_dict(tokens)
        except (KeyError, TypeError, ValueError):
            logger.debug("Stored token set is incomplete")
            return False

        if not token_set.access_token:
            return False

        if not token_set.has_scopes(self.scopes):
            logger.info("Stored token lacks required scopes")
            return False

        if not token_set.is_expired():
            return True

        if not token_set.refresh_token:
            logger.info("Stored token expired and has no refresh token")
            return False

        # Confirm the refresh token still works; the result is not kept
        try:
            await refresh_access_token(client.config, token_set, http=self.http)
        except AuthFailedError as e:
            logger.info(f"Stored refresh token rejected: {e}")
            return False

        return True

    async def get_new_token(self, client: AuthorizedClient) -> NewTokenRequest:
        state = create_state()
        server = await start_callback_server(
            state,
            host=self.callback_host,
            port=self.callback_port,
        )

        try:
            flow = create_authorization_flow(client.config, server.redirect_uri, self.scopes, state=state)
        except Exception:
            await server.stop()
            raise

        token_future = asyncio.ensure_future(self._complete_authorization(client, server, flow))
        return server, flow.url, token_future

    async def _complete_authorization(
        self,
        client: AuthorizedClient,
        server: OAuthCallbackServer,
        flow: AuthorizationFlow,
    ) -> Dict[str, Any]:
        """Wait for the redirect, exchange the code and attach the tokens to ``client``"""
        try:
            result = await server.wait_for_callback(timeout=self.callback_timeout)
        finally:
            await server.stop()

        if result is None:
            raise AuthFailedError("Authorization timed out. Try again.")
        if not result.ok:
            raise AuthFailedError(f"Authorization was not granted: {result.error}")

        tokens = await exchange_code_for_tokens(
            client.config,
            result.code,
            flow.pkce.verifier,
            flow.redirect_uri,
            http=self.http,
        )

        payload = tokens.to_dict()
        client.set_credentials(payload)
        return payload

    # Documents

    async def _request(
        self,
        method: str,
        url: str,
        credential: AuthorizedClient,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send an authorized request, mapping every failure to RemoteStoreError"""
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(await credential.auth_headers(self.http))

        try:
            response = await self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Drive request {method} {url} failed: {e}")
            raise RemoteStoreError(f"Google Docs request failed: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error(f"Drive request {method} {url} returned {response.status_code}: {message}")
            raise RemoteStoreError(
                f"Google Docs request failed (HTTP {response.status_code}): {message}",
                status_code=response.status_code,
            )

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        """Decode a successful response body as a JSON object"""
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Drive returned a non-JSON body for {response.request.url}: {e}")
            raise RemoteStoreError("Google Docs returned an unreadable response.") from e
        if not isinstance(data, dict):
            raise RemoteStoreError("Google Docs returned an unexpected response.")
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            error = response.json().get("error")
        except ValueError:
            return response.text[:200]
        if isinstance(error, dict):
            return error.get("message", "") or str(error)
        return str(error or response.text[:200])

    async def find_or_create_doc(self, title: str, folder_id: str, credential: AuthorizedClient) -> str:
        query = (
            f"name = '{escape_query_value(title)}' "
            f"and mimeType = '{GOOGLE_DOC_MIME_TYPE}' "
            f"and trashed = false"
        )
        if folder_id:
            query += f" and '{escape_query_value(folder_id)}' in parents"

        response = await self._request(
            "GET",
            f"{DRIVE_API_BASE}/files",
            credential,
            params={
                "q": query,
                "fields": "files(id, name)",
                "orderBy": "createdTime",
                "pageSize": 1,
                "spaces": "drive",
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
        )
        files: List[Dict[str, Any]] = self._json(response).get("files", [])
        if files:
            document_id = files[0]["id"]
            logger.debug(f"Found document '{title}' ({document_id})")
            return document_id

        metadata: Dict[str, Any] = {"name": title, "mimeType": GOOGLE_DOC_MIME_TYPE}
        if folder_id:
            metadata["parents"] = [folder_id]

        response = await self._request(
            "POST",
            f"{DRIVE_API_BASE}/files",
            credential,
            params={"fields": "id", "supportsAllDrives": "true"},
            json=metadata,
        )
        document_id = self._json(response).get("id")
        if not document_id:
            raise RemoteStoreError("Google Docs did not return an id for the new document.")
        logger.info(f"Created document '{title}' ({document_id})")
        return document_id

    async def has_open_comments(self, credential: AuthorizedClient, document_id: str) -> bool:
        page_token: Optional[str] = None

        while True:
            params: Dict[str, Any] = {
                "fields": "nextPageToken, comments(id, resolved, deleted)",
                "pageSize": COMMENTS_PAGE_SIZE,
                "includeDeleted": "false",
            }
            if page_token:
                params["pageToken"] = page_token

            response = await self._request(
                "GET",
                f"{DRIVE_API_BASE}/files/{document_id}/comments",
                credential,
                params=params,
            )
            data = self._json(response)

            for comment in data.get("comments", []):
                if not comment.get("resolved") and not comment.get("deleted"):
                    logger.debug(f"Document {document_id} has open comment {comment.get('id')}")
                    return True

            page_token = data.get("nextPageToken")
            if not page_token:
                return False

    async def update_html(
        self,
        document_id: str,
        content: str,
        credential: AuthorizedClient,
        wipe: bool = True,
    ) -> None:
        if wipe:
            html = markdown_to_html(content)
        else:
            response = await self._request(
                "GET",
                f"{DRIVE_API_BASE}/files/{document_id}/export",
                credential,
                params={"mimeType": "text/html"},
            )
            html = append_html(response.text, content)

        await self._request(
            "PATCH",
            f"{DRIVE_UPLOAD_BASE}/files/{document_id}",
            credential,
            params={"uploadType": "media", "supportsAllDrives": "true"},
            headers={"Content-Type": "text/html; charset=utf-8"},
            content=html.encode("utf-8"),
        )
        logger.info(f"Wrote {len(html)} characters of HTML to document {document_id} (wipe={wipe})")
