"""Shared fakes for the sync core tests."""

import asyncio
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from docs_store.base import Credential, DocumentStore
from docsync import Settings, Sink

CLIENT_SECRETS = json.dumps({
    "installed": {
        "client_id": "1234567890-test.apps.googleusercontent.com",
        "client_secret": "test-secret",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "redirect_uris": ["http://localhost"],
    }
})

VALID_TOKENS = {"access_token": "cached-access", "refresh_token": "cached-refresh"}


class RecordingSink(Sink):
    """Sink that records every side effect in call order."""

    def __init__(self):
        self.events: List[Tuple[str, str]] = []

    def notify(self, message: str) -> None:
        self.events.append(("notify", message))

    def copy_link(self, url: str) -> None:
        self.events.append(("copy_link", url))

    def launch(self, url: str) -> None:
        self.events.append(("launch", url))

    def of(self, kind: str) -> List[str]:
        return [value for event, value in self.events if event == kind]

    @property
    def notices(self) -> List[str]:
        return self.of("notify")

    @property
    def clipboard(self) -> Optional[str]:
        links = self.of("copy_link")
        return links[-1] if links else None


class FakeCredential(Credential):
    def __init__(self, blob: str):
        self.blob = blob
        self.tokens: Optional[Dict[str, Any]] = None

    def set_credentials(self, tokens: Dict[str, Any]) -> None:
        self.tokens = tokens


class FakeServer:
    def __init__(self):
        self.stop_calls = 0

    async def stop(self) -> None:
        self.stop_calls += 1

    @property
    def stopped(self) -> bool:
        return self.stop_calls > 0


class FakeDocumentStore(DocumentStore):
    """In-memory document store.

    A token is valid when its access_token equals ``valid_access_token``.
    With ``issue_tokens`` set, new-token requests resolve immediately;
    otherwise the test resolves ``pending[-1]`` itself.
    """

    def __init__(self, issue_tokens: Optional[Dict[str, Any]] = None):
        self.valid_access_token = VALID_TOKENS["access_token"]
        self.issue_tokens = issue_tokens
        self.calls: List[Tuple[Any, ...]] = []
        self.documents: Dict[Tuple[str, str], str] = {}
        self.contents: Dict[str, str] = {}
        self.commented: set = set()
        self.servers: List[FakeServer] = []
        self.pending: List["asyncio.Future[Dict[str, Any]]"] = []
        self.fail_with: Optional[Exception] = None

    def calls_to(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def get_client(self, credentials_blob: str) -> FakeCredential:
        self.calls.append(("get_client", credentials_blob))
        return FakeCredential(credentials_blob)

    async def has_valid_token(self, client, tokens) -> bool:
        self.calls.append(("has_valid_token", tokens))
        await asyncio.sleep(0)
        return bool(tokens) and tokens.get("access_token") == self.valid_access_token

    async def get_new_token(self, client):
        self.calls.append(("get_new_token",))
        server = FakeServer()
        self.servers.append(server)
        future: "asyncio.Future[Dict[str, Any]]" = asyncio.get_running_loop().create_future()
        if self.issue_tokens is not None:
            client.set_credentials(self.issue_tokens)
            future.set_result(self.issue_tokens)
        self.pending.append(future)
        return server, "https://accounts.example/authorize?state=abc", future

    async def find_or_create_doc(self, title, folder_id, credential) -> str:
        self.calls.append(("find_or_create_doc", title, folder_id, credential))
        if self.fail_with is not None:
            raise self.fail_with
        key = (title, folder_id)
        if key not in self.documents:
            self.documents[key] = f"doc-{len(self.documents) + 1}"
        return self.documents[key]

    async def has_open_comments(self, credential, document_id) -> bool:
        self.calls.append(("has_open_comments", document_id))
        return document_id in self.commented

    async def update_html(self, document_id, content, credential, wipe=True) -> None:
        self.calls.append(("update_html", document_id, content, credential, wipe))
        self.contents[document_id] = content if wipe else self.contents.get(document_id, "") + content


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def settings():
    return Settings(credentials=CLIENT_SECRETS)


@pytest.fixture
def saved():
    """Persist capability that records every saved snapshot."""
    snapshots: List[Dict[str, Any]] = []

    def persist(record: Settings) -> None:
        snapshots.append(record.to_dict())

    persist.snapshots = snapshots
    return persist
