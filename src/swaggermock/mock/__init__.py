"""
SwaggerMock Mock Server Module

Mock HTTP server functionality for answering requests from a Swagger document.

This module provides:
- FastAPI-based mock server
- Path template matching and operation resolution
- Response synthesis from examples and schema definitions
- Bearer token checks and a mocked OAuth token endpoint
"""

from .server import MockServer, MockConfig, MockMetrics, create_mock_server
from .matcher import (
    RouteMatcher,
    RouteTemplate,
    OperationResolver,
    MatchResult,
    InvalidTemplateError,
    split_path
)
from .generator import (
    MockGenerator,
    MockRequest,
    MockResponse,
    ResponseSynthesizer,
    create_default_object,
    SUCCESS_STATUS_CODES
)
from .auth import validate_bearer_token, oauth_token_response, is_token_request

__all__ = [
    # Server
    'MockServer',
    'MockConfig',
    'MockMetrics',
    'create_mock_server',

    # Matcher
    'RouteMatcher',
    'RouteTemplate',
    'OperationResolver',
    'MatchResult',
    'InvalidTemplateError',
    'split_path',

    # Generator
    'MockGenerator',
    'MockRequest',
    'MockResponse',
    'ResponseSynthesizer',
    'create_default_object',
    'SUCCESS_STATUS_CODES',

    # Auth
    'validate_bearer_token',
    'oauth_token_response',
    'is_token_request',
]

__version__ = '1.0.0'
