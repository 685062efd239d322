"""
Remote document store package.

The sync core only depends on the DocumentStore contract; GoogleDocsStore
is the Drive-backed implementation.
"""
from .base import Credential, DocumentStore, NewTokenRequest, ServerHandle
from .credential import AuthorizedClient
from .conversion import markdown_to_html
from .google_docs import GoogleDocsStore

__all__ = [
    'Credential',
    'DocumentStore',
    'NewTokenRequest',
    'ServerHandle',
    'AuthorizedClient',
    'markdown_to_html',
    'GoogleDocsStore',
]
