"""
Google Docs sync core.

Caches an OAuth credential behind a single in-flight authorization flow,
then pushes a markdown document to its Google Doc (guarded by an open
comments check) or opens it in the browser.
"""
from .errors import (
    DocSyncError,
    ConfigurationError,
    AuthInProgressError,
    AuthFailedError,
    RemoteStoreError,
)
from .models import SyncOutcome, SyncRequest, SyncResult, google_docs_url
from .settings_store import Settings, SettingsStore
from .sinks import Sink, ConsoleSink
from .auth_controller import AuthController
from .orchestrator import SyncOrchestrator, build_orchestrator

__version__ = "0.1.0"

__all__ = [
    'DocSyncError',
    'ConfigurationError',
    'AuthInProgressError',
    'AuthFailedError',
    'RemoteStoreError',
    'SyncOutcome',
    'SyncRequest',
    'SyncResult',
    'google_docs_url',
    'Settings',
    'SettingsStore',
    'Sink',
    'ConsoleSink',
    'AuthController',
    'SyncOrchestrator',
    'build_orchestrator',
]
