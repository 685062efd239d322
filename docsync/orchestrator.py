"""Push and open flows for a single document"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, TypeVar

from .auth_controller import AuthController
from .errors import DocSyncError
from .models import SyncOutcome, SyncRequest, SyncResult, google_docs_url
from .settings_store import Settings
from .sinks import Sink

if TYPE_CHECKING:
    from docs_store.base import DocumentStore

logger = logging.getLogger(__name__)

UPDATED_NOTICE = "Document updated."
OPEN_COMMENTS_NOTICE = "Document has open comments. Please resolve them before pushing content."
OPENED_NOTICE = "Opening document."

T = TypeVar("T")


class SyncOrchestrator:
    """Turns a (title, content) pair into a Google Doc write or open.

    Pushes are full replaces gated by a single conflict check: a document
    with unresolved comments is never overwritten.
    """

    def __init__(
        self,
        settings: Settings,
        auth: AuthController,
        store: "DocumentStore",
        sink: Sink,
    ):
        self.settings = settings
        self.auth = auth
        self.store = store
        self.sink = sink

    async def push(self, title: str, content: str) -> SyncResult:
        """Overwrite the document named ``title`` with ``content``

        Returns:
            SyncResult with outcome UPDATED, or OPEN_COMMENTS when the
            document has unresolved comments and was left untouched
        """
        return await self._notify_failures(self._push(SyncRequest(title, content)))

    async def open(self, title: str, content: str = "") -> SyncResult:
        """Open the document named ``title`` in the browser, creating it if absent

        ``content`` is not written.
        """
        return await self._notify_failures(self._open(SyncRequest(title, content)))

    async def push_file(self, path: Path) -> SyncResult:
        """Push a local file; the title is the file name without extension"""
        request = SyncRequest.from_file(path)
        return await self.push(request.title, request.content)

    async def open_file(self, path: Path) -> SyncResult:
        """Open the document for a local file"""
        return await self.open(Path(path).stem)

    async def _push(self, request: SyncRequest) -> SyncResult:
        credential = await self.auth.get_auth()
        document_id = await self.store.find_or_create_doc(request.title, self.settings.folder_id, credential)
        link = google_docs_url(document_id)

        if await self.store.has_open_comments(credential, document_id):
            logger.info(f"Skipped push of '{request.title}': document has open comments")
            self.sink.copy_link(link)
            self.sink.notify(OPEN_COMMENTS_NOTICE)
            return SyncResult(
                success=False,
                outcome=SyncOutcome.OPEN_COMMENTS,
                document_id=document_id,
                link=link,
            )

        await self.store.update_html(document_id, request.content, credential, wipe=True)
        logger.info(f"Pushed '{request.title}' to {link}")
        self.sink.copy_link(link)
        self.sink.notify(UPDATED_NOTICE)
        return SyncResult(success=True, outcome=SyncOutcome.UPDATED, document_id=document_id, link=link)

    async def _open(self, request: SyncRequest) -> SyncResult:
        credential = await self.auth.get_auth()
        document_id = await self.store.find_or_create_doc(request.title, self.settings.folder_id, credential)
        link = google_docs_url(document_id)

        self.sink.copy_link(link)
        self.sink.launch(link)
        self.sink.notify(OPENED_NOTICE)
        return SyncResult(success=True, outcome=SyncOutcome.OPENED, document_id=document_id, link=link)

    async def _notify_failures(self, flow: Awaitable[T]) -> T:
        """Report a failure through the sink, then let it propagate"""
        try:
            return await flow
        except DocSyncError as e:
            logger.error(f"Sync failed: {e}")
            self.sink.notify(e.user_message)
            raise


def build_orchestrator(
    settings: Settings,
    store: "DocumentStore",
    sink: Sink,
    persist: Callable[[Settings], None],
    browser_delay: Optional[float] = None,
) -> SyncOrchestrator:
    """Wire an AuthController and SyncOrchestrator around one settings record"""
    kwargs = {} if browser_delay is None else {"browser_delay": browser_delay}
    auth = AuthController(settings, store, sink, persist, **kwargs)
    return SyncOrchestrator(settings, auth, store, sink)
