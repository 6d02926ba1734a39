"""
SwaggerMock Response Generator

Builds mock responses for resolved Swagger operations.

Features:
- Success status selection (200, then 201, then 204)
- Inline application/json examples
- Examples taken from referenced definitions
- Structural defaults synthesized from definition property types
- Collection and enum responses for array schemas
"""

import copy
import logging
from typing import List, Dict, Any, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import urlparse, parse_qs

from ..schema import Document, Operation, Response, Schema, SchemaRef
from .matcher import OperationResolver


logger = logging.getLogger("swaggermock.mock")

# Preferred success codes, first declared one wins
SUCCESS_STATUS_CODES = ('200', '201', '204')

JSON_CONTENT_TYPE = 'application/json'

TIMESTAMP_FORMATS = ('date-time', 'date')


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_default_object(
    definition: Schema,
    now: Optional[Callable[[], datetime]] = None
) -> Dict[str, Any]:
    """
    Create an object with every property set to a placeholder for its type.

    Property order follows the definition. Nested objects are not expanded.

    Args:
        definition: Definition without a usable example
        now: Clock used for date/date-time properties (defaults to UTC now)

    Returns:
        Dict mapping property names to placeholder values
    """
    clock = now or _utc_now
    result = {}

    for name, prop in definition.properties.items():
        if prop.type == 'string':
            if prop.format in TIMESTAMP_FORMATS:
                value = clock().strftime('%Y-%m-%dT%H:%M:%SZ')
            else:
                value = 'string'
        elif prop.type in ('number', 'integer'):
            value = 0
        elif prop.type == 'boolean':
            value = True
        elif prop.type == 'array':
            value = []
        else:
            # object and unknown types
            value = None

        result[name] = value

    return result


@dataclass
class MockRequest:
    """Incoming request as seen by the generator."""

    path: str
    method: str
    query: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_url(cls, method: str, url: str) -> 'MockRequest':
        """Create MockRequest from a method and a full or path-only URL."""
        parsed = urlparse(url)
        if parsed.scheme in ('http', 'https'):
            path, query = parsed.path, parsed.query
        else:
            # urlparse would read "//host/..." as a network location
            path, _, query = url.partition('?')
        return cls(
            path=path or '/',
            method=method.upper(),
            query=parse_qs(query)
        )


@dataclass
class MockResponse:
    """
    Generated mock response.

    ``source`` names how the body was produced: example, definition_example,
    default_object, collection, enum, empty or not_found.
    """

    status_code: int
    body: Any = None
    source: str = "empty"
    reason: str = ""
    template: Optional[str] = None

    @classmethod
    def not_found(cls, reason: str = "", template: Optional[str] = None) -> 'MockResponse':
        """Create the 404 response used for every unresolvable request."""
        return cls(status_code=404, source="not_found", reason=reason, template=template)

    @property
    def matched(self) -> bool:
        """True if an operation produced this response."""
        return self.source != "not_found"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'status_code': self.status_code,
            'body': self.body,
            'source': self.source,
            'reason': self.reason,
            'template': self.template
        }


class ResponseSynthesizer:
    """
    Derives a status code and body for an operation.

    For the first declared success code the body is taken from, in order:
    1. The inline application/json example
    2. The example of the definition referenced by the schema
    3. A default object built from that definition's property types
    4. A one-element list built from the definition referenced by schema.items
    5. The enum values of schema.items
    Otherwise the body is None.

    Example:
        synthesizer = ResponseSynthesizer(document)
        response = synthesizer.synthesize(operation)

        if response is not None:
            print(response.status_code, response.body)
    """

    def __init__(
        self,
        document: Document,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize response synthesizer.

        Args:
            document: Parsed Swagger document, used to resolve $ref
            now: Clock for date/date-time defaults (defaults to UTC now)
        """
        self.document = document
        self.now = now or _utc_now

    def synthesize(self, operation: Operation) -> Optional[MockResponse]:
        """
        Synthesize a response for an operation.

        Args:
            operation: Resolved operation

        Returns:
            MockResponse, or None if no success status code is declared
        """
        for status_code in SUCCESS_STATUS_CODES:
            response = operation.responses.get(status_code)
            if response is None:
                continue

            body, source = self._build_body(response)
            return MockResponse(
                status_code=int(status_code),
                body=body,
                source=source,
                reason=f"Declared {status_code} response"
            )

        return None

    def _build_body(self, response: Response):
        """Pick the body for a response and name the strategy that produced it."""
        if JSON_CONTENT_TYPE in response.examples:
            return copy.deepcopy(response.examples[JSON_CONTENT_TYPE]), "example"

        schema = response.schema
        if schema is None:
            return None, "empty"

        if schema.ref:
            definition = self._resolve(schema)
            if definition is None:
                return None, "empty"
            if definition.example is not None:
                return copy.deepcopy(definition.example), "definition_example"
            return create_default_object(definition, self.now), "default_object"

        items = schema.items
        if items is not None:
            if items.ref:
                definition = self._resolve(items)
                if definition is None:
                    return None, "empty"
                return [self._definition_value(definition)], "collection"

            if items.enum is not None:
                return list(items.enum), "enum"

        return None, "empty"

    def _resolve(self, schema: SchemaRef) -> Optional[Schema]:
        """Resolve a $ref against the document definitions, logging misses."""
        definition = self.document.resolve_ref(schema)

        if definition is None:
            logger.warning(f"Unresolved schema reference {schema.ref}")
        return definition

    def _definition_value(self, definition: Schema) -> Any:
        """Example of a definition, or its structural default."""
        if definition.example is not None:
            return copy.deepcopy(definition.example)
        return create_default_object(definition, self.now)


class MockGenerator:
    """
    Produces mock responses for incoming requests.

    Stateless apart from the document it was built for, so a single
    instance can serve concurrent requests.

    Example:
        generator = MockGenerator(document)
        response = generator.generate(MockRequest('/users/123', 'GET'))

        print(response.status_code, response.body)
    """

    def __init__(
        self,
        document: Document,
        resolver: Optional[OperationResolver] = None,
        synthesizer: Optional[ResponseSynthesizer] = None
    ):
        """
        Initialize mock generator.

        Args:
            document: Parsed Swagger document
            resolver: Optional OperationResolver instance (will create if None)
            synthesizer: Optional ResponseSynthesizer instance (will create if None)
        """
        self.document = document
        self.resolver = resolver or OperationResolver(document)
        self.synthesizer = synthesizer or ResponseSynthesizer(document)

    def generate(self, request: MockRequest) -> MockResponse:
        """
        Generate the mock response for a request.

        Args:
            request: Incoming request

        Returns:
            MockResponse; 404 with no body when nothing can answer the request
        """
        match = self.resolver.find_match(request.path, request.method)

        if not match.matched:
            return MockResponse.not_found(match.reason, template=match.template)

        if not match.operation.responses:
            return MockResponse.not_found(
                f"No responses declared for {request.method.upper()} {match.template}",
                template=match.template
            )

        response = self.synthesizer.synthesize(match.operation)
        if response is None:
            return MockResponse.not_found(
                f"No success response declared for {request.method.upper()} {match.template}",
                template=match.template
            )

        response.template = match.template
        return response
