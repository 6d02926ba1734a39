"""
Tests for SwaggerMock Mock Server

Tests the FastAPI-based mock server including:
- Server initialization and configuration
- Request handling and response serving
- Bearer token checks and the OAuth token endpoint
- Lazy document loading
- Admin API endpoints
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from swaggermock.mock.auth import MOCK_ACCESS_TOKEN
from swaggermock.mock.server import (
    MockConfig,
    MockMetrics,
    MockServer,
    create_mock_server
)


AUTH_HEADERS = {'Authorization': f'Bearer {MOCK_ACCESS_TOKEN}'}


@pytest.fixture
def server(document):
    """Server with the sample document injected."""
    return MockServer(document=document)


@pytest.fixture
def client(server):
    """Test client for the sample server."""
    return TestClient(server.app)


class TestMockConfig:
    """Test MockConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = MockConfig()

        assert config.document_source is None
        assert config.host == '127.0.0.1'
        assert config.port == 8080
        assert config.auth_enabled is True
        assert config.token_path == '/oauth/connect/token'
        assert config.admin_enabled is True
        assert config.preload is False

    def test_custom_config(self):
        """Test custom configuration."""
        config = MockConfig(
            document_source='swagger.json',
            host='0.0.0.0',
            port=9090,
            auth_enabled=False
        )

        assert config.document_source == 'swagger.json'
        assert config.port == 9090
        assert config.auth_enabled is False


class TestMockMetrics:
    """Test MockMetrics dataclass."""

    def test_metrics_initialization(self):
        """Test initializing metrics."""
        metrics = MockMetrics()

        assert metrics.total_requests == 0
        assert metrics.matched_requests == 0
        assert metrics.unauthorized_requests == 0

    def test_metrics_to_dict(self):
        """Test converting metrics to dictionary."""
        metrics = MockMetrics(
            total_requests=12,
            matched_requests=9,
            unmatched_requests=1,
            unauthorized_requests=2
        )

        data = metrics.to_dict()

        assert data['total_requests'] == 12
        assert data['match_rate'] == 90.0
        assert 'uptime_seconds' in data


class TestMockServer:
    """Test MockServer construction."""

    def test_requires_document(self):
        """Test a server needs a document source or document."""
        with pytest.raises(ValueError):
            MockServer()

    def test_lazy_loading(self, swagger_file):
        """Test the document is not read until the first request."""
        server = MockServer(str(swagger_file))

        assert server.provider.loaded is False

        response = TestClient(server.app).get('/notification/webhooks/1', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert server.provider.loaded is True

    def test_preload(self, swagger_file):
        """Test preloading reads the document at construction."""
        server = MockServer(str(swagger_file), config=MockConfig(preload=True))

        assert server.provider.loaded is True

    def test_preload_missing_file(self, tmp_path):
        """Test preloading a missing file fails fast."""
        with pytest.raises(FileNotFoundError):
            MockServer(str(tmp_path / 'missing.json'), config=MockConfig(preload=True))

    def test_remote_document(self, swagger_dict):
        """Test serving a document fetched over HTTP."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=swagger_dict))
        server = MockServer('https://docs.example.com/swagger.json', transport=transport)

        response = TestClient(server.app).get('/signature/documents/summary', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()['size'] == 1

    def test_create_mock_server(self, swagger_file):
        """Test the convenience constructor."""
        server = create_mock_server(str(swagger_file), port=9000, auth_enabled=False)

        assert server.config.port == 9000
        assert server.config.auth_enabled is False
        assert server.config.document_source == str(swagger_file)

    def test_get_app(self, server):
        """Test getting FastAPI app instance."""
        app = server.get_app()

        assert app is server.app
        assert hasattr(app, 'routes')


class TestMockEndpoints:
    """Test mocked routes."""

    def test_inline_example(self, client):
        """Test a templated path returns the inline example."""
        response = client.get('/notification/webhooks/123', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.headers['content-type'].startswith('application/json')
        assert response.json() == {'id': 1, 'name': 'My webhook'}
        assert response.headers['X-SwaggerMock-Template'] == '/notification/webhooks/{id}'
        assert response.headers['X-SwaggerMock-Source'] == 'example'

    def test_exact_match_priority(self, client):
        """Test the literal summary path wins over the documentId template."""
        response = client.get('/signature/documents/summary', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert len(response.json()['data']) > 0

    def test_default_object(self, client):
        """Test a definition without example is served as defaults."""
        response = client.get('/signature/documents/abc', headers=AUTH_HEADERS)

        body = response.json()
        assert response.status_code == 200
        assert body['documentId'] == 'string'
        assert body['createdAt'].endswith('Z')
        assert body['signed'] is True

    def test_created(self, client):
        """Test POST returns the 201 response."""
        response = client.post('/notification/webhooks', headers=AUTH_HEADERS, json={'url': 'https://x'})

        assert response.status_code == 201
        assert response.json() == {'id': 0, 'url': 'string'}

    def test_no_content(self, client):
        """Test DELETE returns 204 with an empty body."""
        response = client.delete('/notification/webhooks/1', headers=AUTH_HEADERS)

        assert response.status_code == 204
        assert response.content == b''

    def test_query_string_ignored(self, client):
        """Test query parameters don't change the result."""
        response = client.get('/notification/webhooks?limit=5', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json() == [{'id': 42, 'name': 'Example webhook'}]

    def test_not_found(self, client):
        """Test unmatched paths give 404 with an empty body."""
        response = client.get('/foo/bar', headers=AUTH_HEADERS)

        assert response.status_code == 404
        assert response.content == b''
        assert response.headers['X-SwaggerMock-Matched'] == 'false'

    def test_unsupported_method(self, client):
        """Test undeclared methods give 404."""
        response = client.patch('/notification/webhooks/1', headers=AUTH_HEADERS)

        assert response.status_code == 404

    def test_unresolved_ref(self, client):
        """Test a missing definition gives 200 with an empty body."""
        response = client.get('/broken/1', headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.content == b''

    def test_yaml_document_with_unquoted_dates(self, tmp_path):
        """Test YAML timestamps in examples are served as JSON strings."""
        path = tmp_path / 'swagger.yaml'
        path.write_text(
            "swagger: '2.0'\n"
            "paths:\n"
            "  /things/{id}:\n"
            "    get:\n"
            "      responses:\n"
            "        '200':\n"
            "          examples:\n"
            "            application/json:\n"
            "              id: 1\n"
            "              created: 2021-03-04T10:00:00Z\n",
            encoding='utf-8'
        )
        server = MockServer(str(path), config=MockConfig(auth_enabled=False))

        response = TestClient(server.app).get('/things/1')

        assert response.status_code == 200
        assert response.json() == {'id': 1, 'created': '2021-03-04T10:00:00Z'}

    def test_metrics_updated(self, server, client):
        """Test matched and unmatched requests are counted."""
        client.get('/notification/webhooks/1', headers=AUTH_HEADERS)
        client.get('/foo/bar', headers=AUTH_HEADERS)

        assert server.metrics.total_requests == 2
        assert server.metrics.matched_requests == 1
        assert server.metrics.unmatched_requests == 1


class TestAuthentication:
    """Test bearer checks and the token endpoint."""

    def test_missing_token(self, server, client):
        """Test requests without a bearer token are rejected."""
        response = client.get('/notification/webhooks/1')

        assert response.status_code == 401
        assert response.content == b''
        assert server.metrics.unauthorized_requests == 1

    def test_invalid_token(self, client):
        """Test non-JWT bearer tokens are rejected."""
        response = client.get('/notification/webhooks/1', headers={'Authorization': 'Bearer abc'})

        assert response.status_code == 401

    def test_token_endpoint(self, server, client):
        """Test the OAuth token endpoint needs no authorization."""
        response = client.post('/oauth/connect/token', data={'grant_type': 'client_credentials'})

        assert response.status_code == 200
        assert response.json()['access_token'] == MOCK_ACCESS_TOKEN
        assert response.json()['token_type'] == 'Bearer'
        assert server.metrics.token_requests == 1

    def test_issued_token_is_accepted(self, client):
        """Test the issued token works for mocked routes."""
        token = client.post('/oauth/connect/token').json()['access_token']

        response = client.get('/notification/webhooks/1', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200

    def test_auth_disabled(self, document):
        """Test requests pass without tokens when checks are off."""
        server = MockServer(document=document, config=MockConfig(auth_enabled=False))

        response = TestClient(server.app).get('/notification/webhooks/1')

        assert response.status_code == 200


class TestDocumentErrors:
    """Test behavior when the document can't be loaded."""

    def test_missing_file(self, tmp_path):
        """Test a missing document gives 503."""
        server = MockServer(str(tmp_path / 'missing.json'))

        response = TestClient(server.app).get('/anything', headers=AUTH_HEADERS)

        assert response.status_code == 503
        assert response.json()['error'] == 'Swagger document unavailable'
        assert server.metrics.document_errors == 1

    def test_failed_fetch_is_retried(self, swagger_dict):
        """Test the next request retries a failed fetch."""
        statuses = [500, 200]

        def handler(request):
            return httpx.Response(statuses.pop(0), json=swagger_dict)

        server = MockServer('https://docs.example.com/swagger.json', transport=httpx.MockTransport(handler))
        client = TestClient(server.app)

        first = client.get('/notification/webhooks/1', headers=AUTH_HEADERS)
        second = client.get('/notification/webhooks/1', headers=AUTH_HEADERS)

        assert first.status_code == 503
        assert second.status_code == 200


class TestAdminEndpoints:
    """Test admin API."""

    def test_admin_metrics_endpoint(self, client):
        """Test admin metrics endpoint needs no token."""
        client.get('/foo/bar', headers=AUTH_HEADERS)

        response = client.get('/__admin__/metrics')

        assert response.status_code == 200
        data = response.json()
        assert data['total_requests'] == 1
        assert data['unmatched_requests'] == 1

    def test_admin_reset_endpoint(self, server, client):
        """Test resetting metrics."""
        client.get('/foo/bar', headers=AUTH_HEADERS)

        response = client.post('/__admin__/reset')

        assert response.json() == {'status': 'reset'}
        assert server.metrics.total_requests == 0

    def test_admin_config_endpoint(self, client):
        """Test admin config endpoint."""
        data = client.get('/__admin__/config').json()

        assert data['document_loaded'] is True
        assert data['auth_enabled'] is True

    def test_admin_routes_endpoint(self, client, swagger_dict):
        """Test listing routes in declaration order."""
        data = client.get('/__admin__/routes').json()

        assert data['title'] == 'Signature API'
        assert [r['template'] for r in data['routes']] == list(swagger_dict['paths'])

        invalid = [r for r in data['routes'] if not r['valid']]
        assert [r['template'] for r in invalid] == ['/invalid/{unclosed']
        assert invalid[0]['error']

    def test_admin_disabled(self, document):
        """Test admin paths fall through to mocking when disabled."""
        server = MockServer(document=document, config=MockConfig(admin_enabled=False))

        response = TestClient(server.app).get('/__admin__/metrics', headers=AUTH_HEADERS)

        assert response.status_code == 404
