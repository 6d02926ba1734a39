"""
SwaggerMock Request Matcher

Matches incoming request paths against the path templates of a Swagger
document and picks the operation that should answer the request.

Features:
- Segment-by-segment template matching with {placeholder} support
- Exact-match priority over placeholder templates
- First-match-wins in document declaration order
- Invalid templates are skipped and logged, never fatal
"""

import logging
import re
from typing import List, Dict, Any, Optional, Tuple, Union
from dataclasses import dataclass

from ..schema import Document, PathItem, Operation


logger = logging.getLogger("swaggermock.mock")

# Placeholder inside a segment, braces already validated as balanced
_PLACEHOLDER_RE = re.compile(r'\{([^{}]*)\}')


class InvalidTemplateError(ValueError):
    """Raised when a path template cannot be parsed."""

    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid path template {template!r}: {reason}")


def split_path(path: str) -> List[str]:
    """
    Split a path into segments.

    A single leading slash is dropped, so "/" gives no segments and
    "/a/b" gives ["a", "b"]. Empty segments are kept.
    """
    if path.startswith('/'):
        path = path[1:]
    return path.split('/') if path else []


def _compile_segment(template: str, segment: str) -> Union[str, re.Pattern]:
    """
    Compile one template segment.

    Returns the segment itself for literals, or a regex for segments that
    contain placeholders. Each placeholder matches one or more characters.
    """
    if not segment:
        raise InvalidTemplateError(template, "empty segment")

    if '{' not in segment and '}' not in segment:
        return segment

    depth = 0
    for char in segment:
        if char == '{':
            depth += 1
            if depth > 1:
                raise InvalidTemplateError(template, f"nested braces in segment {segment!r}")
        elif char == '}':
            depth -= 1
            if depth < 0:
                raise InvalidTemplateError(template, f"unbalanced braces in segment {segment!r}")
    if depth != 0:
        raise InvalidTemplateError(template, f"unbalanced braces in segment {segment!r}")

    parts = []
    position = 0
    for placeholder in _PLACEHOLDER_RE.finditer(segment):
        if not placeholder.group(1).strip():
            raise InvalidTemplateError(template, f"empty placeholder in segment {segment!r}")
        parts.append(re.escape(segment[position:placeholder.start()]))
        parts.append('.+')
        position = placeholder.end()
    parts.append(re.escape(segment[position:]))

    return re.compile(''.join(parts), re.DOTALL)


@dataclass(frozen=True)
class RouteTemplate:
    """A parsed path template, ready to match request paths."""

    template: str
    segments: Tuple[Union[str, re.Pattern], ...]

    @classmethod
    def parse(cls, template: str) -> 'RouteTemplate':
        """
        Parse a path template.

        Args:
            template: Template such as "/users/{id}/orders"

        Returns:
            RouteTemplate instance

        Raises:
            InvalidTemplateError: If the template is malformed
        """
        if not isinstance(template, str) or not template.startswith('/'):
            raise InvalidTemplateError(str(template), "must start with '/'")

        segments = tuple(
            _compile_segment(template, segment)
            for segment in split_path(template)
        )
        return cls(template=template, segments=segments)

    @property
    def has_placeholders(self) -> bool:
        """True if any segment is a placeholder pattern."""
        return any(not isinstance(segment, str) for segment in self.segments)

    def matches(self, request_path: str) -> bool:
        """Check whether a concrete request path fits this template."""
        request_segments = split_path(request_path)

        # No greedy or optional segments: counts must agree
        if len(request_segments) != len(self.segments):
            return False

        for expected, actual in zip(self.segments, request_segments):
            if isinstance(expected, str):
                if expected != actual:
                    return False
            elif not expected.fullmatch(actual):
                return False

        return True


class RouteMatcher:
    """Matches single path templates against request paths."""

    @staticmethod
    def match(
        template: str,
        request_path: str,
        query: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Decide whether a template matches a request path.

        Args:
            template: Path template from the Swagger document
            request_path: Path of the incoming request
            query: Query parameters (accepted for interface symmetry, not consulted)

        Returns:
            True if the path matches the template

        Raises:
            InvalidTemplateError: If the template is malformed
        """
        return RouteTemplate.parse(template).matches(request_path)


@dataclass
class MatchResult:
    """Result of resolving a request against the document."""

    matched: bool
    template: Optional[str] = None
    path_item: Optional[PathItem] = None
    operation: Optional[Operation] = None
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'matched': self.matched,
            'template': self.template,
            'methods': self.path_item.methods if self.path_item else [],
            'reason': self.reason
        }


class OperationResolver:
    """
    Finds the operation that answers a request path and method.

    Resolution order:
    1. A template byte-for-byte equal to the request path
    2. The first template, in declaration order, that matches the path
    3. The operation for the request method on that template's path item

    Example:
        resolver = OperationResolver(document)
        operation = resolver.resolve('/users/123', 'GET')

        if operation is not None:
            print(operation.responses.keys())
    """

    def __init__(self, document: Document):
        """
        Initialize operation resolver.

        Args:
            document: Parsed Swagger document
        """
        self.document = document

        # Build index for faster matching
        self._build_index()

    def _build_index(self):
        """Index templates for exact lookup and compile them for scanning."""
        self.exact_index: Dict[str, PathItem] = {}
        self.routes: List[Tuple[RouteTemplate, PathItem]] = []
        self.invalid_templates: List[InvalidTemplateError] = []

        for template, path_item in self.document.paths:
            self.exact_index.setdefault(template, path_item)

            try:
                self.routes.append((RouteTemplate.parse(template), path_item))
            except InvalidTemplateError as e:
                # The document may contain paths we can't process; skip those.
                self.invalid_templates.append(e)
                logger.warning(f"Skipping {e}")

    def find_match(self, request_path: str, method: str) -> MatchResult:
        """
        Find the path item and operation for a request.

        Args:
            request_path: Path of the incoming request (no query string)
            method: HTTP method

        Returns:
            MatchResult with the operation, or the reason nothing matched
        """
        template = None
        path_item = self.exact_index.get(request_path)

        if path_item is not None:
            template = request_path
            reason = "Exact match"
        else:
            for route, candidate in self.routes:
                if route.matches(request_path):
                    template = route.template
                    path_item = candidate
                    reason = "Template match"
                    break

        if path_item is None:
            return MatchResult(
                matched=False,
                reason=f"No path template matches {request_path}"
            )

        operation = path_item.operation(method)
        if operation is None:
            return MatchResult(
                matched=False,
                template=template,
                path_item=path_item,
                reason=f"Method {method.upper()} not declared for {template}"
            )

        return MatchResult(
            matched=True,
            template=template,
            path_item=path_item,
            operation=operation,
            reason=reason
        )

    def resolve(self, request_path: str, method: str) -> Optional[Operation]:
        """Resolve a request to its operation, or None if nothing handles it."""
        return self.find_match(request_path, method).operation
