"""
SwaggerMock Common Utilities

Shared helpers for loading Swagger documents.
"""

from .utils import (
    get_document_source_from_env,
    is_remote_source,
    parse_document_text,
    fetch_document,
    DocumentLoader,
    DocumentProvider,
    DocumentFetchError,
    DOCUMENT_ENV_VAR
)

__all__ = [
    'get_document_source_from_env',
    'is_remote_source',
    'parse_document_text',
    'fetch_document',
    'DocumentLoader',
    'DocumentProvider',
    'DocumentFetchError',
    'DOCUMENT_ENV_VAR'
]
