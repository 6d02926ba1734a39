"""
SwaggerMock Mock Server

FastAPI-based HTTP mock server that answers requests with responses
synthesized from a Swagger document.

Features:
- Path template matching with exact-match priority
- Responses from inline examples, definition examples or type defaults
- Mocked OAuth token endpoint and bearer token checks
- Lazy, cached document loading from a file or URL
- Admin API for metrics and route inspection
"""

from __future__ import annotations  # Enable forward references for type hints

import json
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import parse_qs

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .auth import DEFAULT_TOKEN_PATH, is_token_request, oauth_token_response, validate_bearer_token
from .generator import MockGenerator, MockRequest, MockResponse
from ..common import DocumentProvider, DocumentFetchError
from ..schema import Document


@dataclass
class MockConfig:
    """Configuration for mock server behavior."""

    # Swagger document (file path or http(s) URL)
    document_source: Optional[str] = None
    fetch_timeout: float = 30.0  # Seconds, remote documents only
    preload: bool = False  # Load the document at startup instead of on first request

    # Authentication
    auth_enabled: bool = True  # Require "Authorization: Bearer ey..." on mocked routes
    token_path: str = DEFAULT_TOKEN_PATH

    # Server options
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    verbose_mode: bool = False  # Show each request and its resolution in console

    # Admin API
    admin_enabled: bool = True
    admin_prefix: str = "/__admin__"


@dataclass
class MockMetrics:
    """Track mock server metrics."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    unauthorized_requests: int = 0
    token_requests: int = 0
    document_errors: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        uptime_seconds = (datetime.now() - datetime.fromisoformat(self.start_time)).total_seconds()
        mocked = self.matched_requests + self.unmatched_requests
        return {
            'total_requests': self.total_requests,
            'matched_requests': self.matched_requests,
            'unmatched_requests': self.unmatched_requests,
            'unauthorized_requests': self.unauthorized_requests,
            'token_requests': self.token_requests,
            'document_errors': self.document_errors,
            'match_rate': round((self.matched_requests / mocked * 100) if mocked > 0 else 0, 2),
            'uptime_seconds': round(uptime_seconds, 2),
            'start_time': self.start_time
        }


class MockServer:
    """
    FastAPI-based mock server for a Swagger-described API.

    Example:
        # Serve a local document
        server = MockServer('swagger.json')
        server.start(host='0.0.0.0', port=8080)

        # With custom config
        config = MockConfig(auth_enabled=False, preload=True)
        server = MockServer('https://example.com/swagger.json', config=config)
        server.start()

        # With a document that is already parsed (tests, embedding)
        server = MockServer(document=Document.from_dict(raw))
    """

    def __init__(
        self,
        document_source: Optional[str] = None,
        config: Optional[MockConfig] = None,
        document: Optional[Document] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize mock server.

        Args:
            document_source: File path or URL of the Swagger document (overrides config)
            config: Optional MockConfig for server behavior
            document: Optional already loaded Document
            transport: Optional httpx transport for fetching remote documents
        """
        self.config = config or MockConfig()
        if document_source:
            self.config.document_source = document_source
        self.metrics = MockMetrics()

        # Setup logging first (before loading the document)
        self.logger = logging.getLogger("swaggermock.mock")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        self.provider = DocumentProvider(
            source=self.config.document_source,
            document=document,
            timeout=self.config.fetch_timeout,
            transport=transport
        )
        self._generator: Optional[MockGenerator] = None

        if self.config.preload and not self.provider.loaded:
            self.provider.get_sync()

        # Setup FastAPI app
        self.app = self._create_app()

    async def get_generator(self) -> MockGenerator:
        """Return the generator for the cached document, loading it if needed."""
        document = await self.provider.get()
        if self._generator is None or self._generator.document is not document:
            self._generator = MockGenerator(document)
        return self._generator

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title="SwaggerMock Server",
            description="Mock HTTP server answering from a Swagger document",
            version="1.0.0"
        )

        # Admin API routes
        if self.config.admin_enabled:
            @app.get(f"{self.config.admin_prefix}/metrics")
            async def get_metrics():
                """Get server metrics."""
                return JSONResponse(content=self.metrics.to_dict())

            @app.post(f"{self.config.admin_prefix}/reset")
            async def reset_metrics():
                """Reset metrics."""
                self.metrics = MockMetrics()
                return JSONResponse(content={'status': 'reset'})

            @app.get(f"{self.config.admin_prefix}/config")
            async def get_config():
                """Get current configuration."""
                return JSONResponse(content={
                    'document_source': self.config.document_source,
                    'document_loaded': self.provider.loaded,
                    'auth_enabled': self.config.auth_enabled,
                    'token_path': self.config.token_path
                })

            @app.get(f"{self.config.admin_prefix}/routes")
            async def list_routes():
                """List path templates in match order with their methods."""
                try:
                    generator = await self.get_generator()
                except (DocumentFetchError, OSError, ValueError) as e:
                    return self._document_error_response(e)

                resolver = generator.resolver
                invalid = {e.template: e.reason for e in resolver.invalid_templates}
                routes = [
                    {
                        'template': template,
                        'methods': path_item.methods,
                        'valid': template not in invalid,
                        'error': invalid.get(template)
                    }
                    for template, path_item in generator.document.paths
                ]
                return JSONResponse(content={
                    'title': generator.document.title,
                    'version': generator.document.version,
                    'total': len(routes),
                    'routes': routes
                })

        # Main catch-all route for mocking
        @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
        async def mock_request(request: Request, path: str):
            """Handle incoming requests and serve mock responses."""
            return await self._handle_request(request)

        return app

    async def _handle_request(self, request: Request) -> Response:
        """
        Handle incoming request and serve mock response.

        Args:
            request: FastAPI Request object

        Returns:
            FastAPI Response with mocked data
        """
        self.metrics.total_requests += 1

        method = request.method
        path = request.url.path

        self.logger.debug(f"Incoming: {method} {request.url}")

        # Token requests are answered before any auth check
        if is_token_request(method, path, self.config.token_path):
            self.metrics.token_requests += 1
            return self._json_response(200, oauth_token_response())

        if self.config.auth_enabled and not validate_bearer_token(request.headers.get('authorization')):
            self.metrics.unauthorized_requests += 1
            self.logger.info(f"Rejected {method} {path}: missing or invalid bearer token")
            return self._json_response(401)

        try:
            generator = await self.get_generator()
        except (DocumentFetchError, OSError, ValueError) as e:
            return self._document_error_response(e)

        mock_request = MockRequest(
            path=path,
            method=method,
            query=parse_qs(request.url.query)
        )
        mock_response = generator.generate(mock_request)

        if mock_response.matched:
            self.metrics.matched_requests += 1
            self.logger.debug(
                f"{method} {path} -> {mock_response.status_code} "
                f"({mock_response.source}, template {mock_response.template})"
            )
        else:
            self.metrics.unmatched_requests += 1
            self.logger.warning(f"No match for {method} {path}: {mock_response.reason}")

        if self.config.verbose_mode:
            timestamp = datetime.now().strftime("%H:%M:%S")
            status_emoji = "✓" if mock_response.matched else "✗"
            print(f"[{timestamp}] {method} {path}")
            print(f"[{timestamp}]   {status_emoji} {mock_response.status_code} {mock_response.reason}")

        return self._create_response(mock_response)

    def _create_response(self, mock_response: MockResponse) -> Response:
        """
        Create FastAPI Response from a generated mock response.

        Args:
            mock_response: Generated response

        Returns:
            FastAPI Response object with SwaggerMock debug headers
        """
        headers = {
            'X-SwaggerMock-Matched': 'true' if mock_response.matched else 'false',
            'X-SwaggerMock-Source': mock_response.source
        }
        if mock_response.template:
            headers['X-SwaggerMock-Template'] = mock_response.template

        return self._json_response(mock_response.status_code, mock_response.body, headers)

    def _json_response(
        self,
        status_code: int,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Response:
        """Serialize body as JSON; None (and any 204 body) writes an empty body."""
        content = b''
        if body is not None and status_code != 204:
            content = json.dumps(body)

        return Response(
            content=content,
            status_code=status_code,
            headers=headers,
            media_type="application/json"
        )

    def _document_error_response(self, error: Exception) -> Response:
        """Report a document that could not be loaded; the next request retries."""
        self.metrics.document_errors += 1
        self.logger.error(f"Swagger document unavailable: {error}")
        return self._json_response(503, {
            'error': 'Swagger document unavailable',
            'detail': str(error)
        })

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        access_log: bool = True
    ):
        """
        Start the mock server.

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        print(f"🚀 SwaggerMock Server starting...")
        print(f"   Host: {actual_host}:{actual_port}")
        print(f"   Document: {self.config.document_source or '(preloaded)'}")
        if self.provider.loaded:
            print(f"   Paths loaded: {len(self.provider.document.paths)}")
        else:
            print(f"   Paths loaded: on first request")

        if not self.config.auth_enabled:
            print(f"   ⚠️  Bearer token check disabled")

        if self.config.admin_enabled:
            print(f"   Admin API: http://{actual_host}:{actual_port}{self.config.admin_prefix}/metrics")

        print()

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_mock_server(
    document_source: str,
    host: str = "127.0.0.1",
    port: int = 8080,
    auth_enabled: bool = True,
    token_path: str = DEFAULT_TOKEN_PATH,
    admin_enabled: bool = True,
    fetch_timeout: float = 30.0,
    preload: bool = False,
    log_level: str = "info",
    verbose_mode: bool = False
) -> MockServer:
    """
    Convenience function to create and configure a mock server.

    Args:
        document_source: File path or URL of the Swagger document
        host: Host to bind to
        port: Port to bind to
        auth_enabled: Require bearer tokens on mocked routes
        token_path: Path of the mocked OAuth token endpoint
        admin_enabled: Expose the admin API
        fetch_timeout: Timeout in seconds for remote documents
        preload: Load the document before serving
        log_level: Logging level name
        verbose_mode: Print each request to the console

    Returns:
        Configured MockServer instance

    Example:
        server = create_mock_server('swagger.json', port=8080, auth_enabled=False)
        server.start()
    """
    config = MockConfig(
        document_source=document_source,
        host=host,
        port=port,
        auth_enabled=auth_enabled,
        token_path=token_path,
        admin_enabled=admin_enabled,
        fetch_timeout=fetch_timeout,
        preload=preload,
        log_level=log_level,
        verbose_mode=verbose_mode
    )

    return MockServer(config=config)
