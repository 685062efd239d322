"""
Remote document store interface.
Defines the contract the sync core consumes; it never looks behind it.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, Tuple


class Credential(ABC):
    """Authorized client handle passed unmodified to the document store"""

    @abstractmethod
    def set_credentials(self, tokens: Dict[str, Any]) -> None:
        """Attach a deserialized token set to this client"""


class ServerHandle(Protocol):
    """Running local listener of an authorization round-trip"""

    async def stop(self) -> None:
        """Stop listening; must be safe to call more than once"""


#: (listener, authorize URL, future resolving to the token payload)
NewTokenRequest = Tuple[ServerHandle, str, "asyncio.Future[Dict[str, Any]]"]


class DocumentStore(ABC):
    """Abstract base class for remote document stores"""

    @abstractmethod
    def get_client(self, credentials_blob: str) -> Credential:
        """Build a client from the application credential

        Pure construction, no network call.

        Raises:
            ConfigurationError: If the blob is malformed
        """

    @abstractmethod
    async def has_valid_token(self, client: Credential, tokens: Optional[Dict[str, Any]]) -> bool:
        """Check whether a token set is usable with this client

        No side effects. False for a missing, incomplete or expired token.
        """

    @abstractmethod
    async def get_new_token(self, client: Credential) -> NewTokenRequest:
        """Start an authorization round-trip

        The returned future resolves with the new token payload (already
        attached to ``client``) or raises AuthFailedError.
        """

    @abstractmethod
    async def find_or_create_doc(self, title: str, folder_id: str, credential: Credential) -> str:
        """Return the id of the document named ``title`` in ``folder_id``, creating it if absent"""

    @abstractmethod
    async def has_open_comments(self, credential: Credential, document_id: str) -> bool:
        """Whether the document has unresolved review comments"""

    @abstractmethod
    async def update_html(
        self,
        document_id: str,
        content: str,
        credential: Credential,
        wipe: bool = True,
    ) -> None:
        """Write markdown ``content`` to the document

        With ``wipe`` the prior content is discarded entirely.
        """
