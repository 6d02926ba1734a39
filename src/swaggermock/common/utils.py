"""
SwaggerMock Common Utilities

Loading Swagger documents from local files or remote URLs, and caching the
parsed document for the lifetime of the server.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlparse

import httpx
import yaml

from ..schema import Document


logger = logging.getLogger("swaggermock.common")

DOCUMENT_ENV_VAR = 'SWAGGERMOCK_DOCUMENT'

YAML_SUFFIXES = ('.yaml', '.yml')


TIMESTAMP_TAG = 'tag:yaml.org,2002:timestamp'


class DocumentYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted dates as strings, as JSON would."""


DocumentYamlLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class DocumentFetchError(RuntimeError):
    """Raised when a remote Swagger document cannot be retrieved or parsed."""


def get_document_source_from_env() -> Optional[str]:
    """
    Retrieve the Swagger document location from the environment.

    Returns:
        Value of SWAGGERMOCK_DOCUMENT (file path or URL), or None if not set
    """
    return os.environ.get(DOCUMENT_ENV_VAR) or None


def is_remote_source(source: str) -> bool:
    """True if the document source is an http(s) URL."""
    return urlparse(source).scheme in ('http', 'https')


def parse_document_text(text: str, yaml_format: bool = False) -> Any:
    """
    Parse raw document text.

    Args:
        text: Document content
        yaml_format: Parse as YAML instead of JSON

    Returns:
        Parsed document (normally a dict)

    Raises:
        ValueError: If the text is not valid JSON/YAML
    """
    if yaml_format:
        try:
            return yaml.load(text, Loader=DocumentYamlLoader)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML document: {e}") from e

    return json.loads(text)


class DocumentLoader:
    """
    Loader for Swagger documents stored on disk.

    JSON is the default; files ending in .yaml or .yml are read as YAML.

    Example:
        loader = DocumentLoader("swagger.json")
        document = loader.load()

        for template in document.templates:
            print(template)
    """

    def __init__(self, file_path: str):
        """
        Initialize document loader.

        Args:
            file_path: Path to Swagger JSON/YAML file
        """
        self.file_path = Path(file_path)

    def load_raw(self) -> Dict[str, Any]:
        """
        Read and parse the file without building the model.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the content is not valid JSON/YAML
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Swagger document not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            text = f.read()

        return parse_document_text(
            text,
            yaml_format=self.file_path.suffix.lower() in YAML_SUFFIXES
        )

    def load(self) -> Document:
        """
        Load the document.

        Returns:
            Parsed Document

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the content is not a Swagger document
        """
        return Document.from_dict(self.load_raw())


async def fetch_document(
    url: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Dict[str, Any]:
    """
    Fetch and parse a remote Swagger document.

    Args:
        url: Document URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Parsed document

    Raises:
        DocumentFetchError: If the request fails or the body can't be parsed
    """
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise DocumentFetchError(f"Failed to retrieve Swagger document from {url}") from e

    content_type = response.headers.get('content-type', '')
    yaml_format = (
        urlparse(url).path.lower().endswith(YAML_SUFFIXES)
        or 'yaml' in content_type
    )

    try:
        return parse_document_text(response.text, yaml_format=yaml_format)
    except ValueError as e:
        raise DocumentFetchError(f"Failed to parse Swagger document from {url}") from e


class DocumentProvider:
    """
    Lazily loads a Swagger document and keeps it for the process lifetime.

    The first call to get() loads the document; concurrent first calls wait
    on the same load. Once assigned, the cached Document is never replaced.
    A failed load leaves the cache empty so the next call tries again.

    Example:
        provider = DocumentProvider("https://example.com/swagger.json")
        document = await provider.get()

        # Or with a document that is already loaded
        provider = DocumentProvider(document=document)
    """

    def __init__(
        self,
        source: Optional[str] = None,
        document: Optional[Document] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize document provider.

        Args:
            source: File path or http(s) URL of the document
            document: Already loaded document (no loading happens)
            timeout: Request timeout in seconds for remote documents
            transport: Optional httpx transport for remote documents
        """
        if source is None and document is None:
            raise ValueError("Either a document source or a loaded document is required")

        self.source = source
        self.timeout = timeout
        self.transport = transport
        self.load_count = 0
        self._document = document
        self._lock = asyncio.Lock()

    @property
    def document(self) -> Optional[Document]:
        """Cached document, or None if it has not been loaded yet."""
        return self._document

    @property
    def loaded(self) -> bool:
        """True once the document is cached."""
        return self._document is not None

    async def get(self) -> Document:
        """
        Return the document, loading it on first use.

        Raises:
            DocumentFetchError: If a remote document can't be retrieved
            FileNotFoundError: If a local document doesn't exist
            ValueError: If the content is not a Swagger document
        """
        if self._document is not None:
            return self._document

        async with self._lock:
            if self._document is None:
                self._document = await self._load()

        return self._document

    def get_sync(self) -> Document:
        """Blocking variant of get() for command-line use."""
        if self._document is not None:
            return self._document
        return asyncio.run(self.get())

    async def _load(self) -> Document:
        """Load and parse the document from its source."""
        self.load_count += 1

        if is_remote_source(self.source):
            raw = await fetch_document(self.source, self.timeout, self.transport)
        else:
            raw = DocumentLoader(self.source).load_raw()

        document = Document.from_dict(raw)
        logger.info(f"Loaded Swagger document from {self.source} ({len(document.paths)} paths)")
        return document
