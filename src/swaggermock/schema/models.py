"""
SwaggerMock Schema Models

Dataclasses mirroring the parts of a Swagger 2.0 document the mock server
reads: paths, operations, responses and definitions.

The model is built once, when the document is loaded, and is never mutated
afterwards. Request handling only reads it.
"""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field


# Methods a path item can declare, in the order they are reported
HTTP_METHODS = ('get', 'post', 'put', 'patch', 'delete')

DEFINITIONS_PREFIX = '#/definitions/'


def _as_dict(value: Any) -> Dict[str, Any]:
    """Return value if it is a mapping, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class PropertySchema:
    """Type information for one property of a definition."""

    type: Optional[str] = None
    format: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'PropertySchema':
        """Create PropertySchema from dictionary."""
        data = _as_dict(data)
        return cls(
            type=data.get('type'),
            format=data.get('format')
        )


@dataclass(frozen=True)
class SchemaRef:
    """
    Schema attached to a response.

    Either points at a definition (``ref``) or describes a collection whose
    element type is in ``items``. ``items`` may itself carry a ``ref`` or an
    ``enum`` of literal values.
    """

    ref: Optional[str] = None
    items: Optional['SchemaRef'] = None
    enum: Optional[Tuple[Any, ...]] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'SchemaRef':
        """Create SchemaRef from a raw ``schema`` mapping."""
        data = _as_dict(data)

        items = None
        if isinstance(data.get('items'), dict):
            items = cls.from_dict(data['items'])

        enum = data.get('enum')
        if not isinstance(enum, list):
            enum = None

        ref = data.get('$ref')
        return cls(
            ref=ref if isinstance(ref, str) else None,
            items=items,
            enum=tuple(enum) if enum is not None else None
        )

    @property
    def definition_name(self) -> Optional[str]:
        """Name of the referenced definition, or None for non-local refs."""
        if not self.ref or not self.ref.startswith(DEFINITIONS_PREFIX):
            return None
        return self.ref[len(DEFINITIONS_PREFIX):]


@dataclass(frozen=True)
class Response:
    """One declared response of an operation."""

    examples: Dict[str, Any] = field(default_factory=dict)
    schema: Optional[SchemaRef] = None
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> 'Response':
        """Create Response from dictionary."""
        data = _as_dict(data)
        schema = data.get('schema')

        return cls(
            examples=dict(_as_dict(data.get('examples'))),
            schema=SchemaRef.from_dict(schema) if isinstance(schema, dict) else None,
            description=data.get('description') or ""
        )


@dataclass(frozen=True)
class Operation:
    """Responses declared for one (path, method) pair, keyed by status code string."""

    responses: Dict[str, Response] = field(default_factory=dict)
    operation_id: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'Operation':
        """
        Create Operation from dictionary.

        Status codes are normalized to strings, since YAML documents may
        spell them as integers.
        """
        data = _as_dict(data)
        responses = {
            str(code): Response.from_dict(response)
            for code, response in _as_dict(data.get('responses')).items()
        }

        return cls(
            responses=responses,
            operation_id=data.get('operationId'),
            summary=data.get('summary')
        )


@dataclass(frozen=True)
class PathItem:
    """Operations available under one path template."""

    get: Optional[Operation] = None
    post: Optional[Operation] = None
    put: Optional[Operation] = None
    patch: Optional[Operation] = None
    delete: Optional[Operation] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'PathItem':
        """Create PathItem from dictionary, ignoring unsupported keys."""
        data = _as_dict(data)
        operations = {
            method: Operation.from_dict(data[method])
            for method in HTTP_METHODS
            if isinstance(data.get(method), dict)
        }
        return cls(**operations)

    def operation(self, method: str) -> Optional[Operation]:
        """
        Get the operation for an HTTP method.

        Args:
            method: HTTP method, any case

        Returns:
            Operation, or None if the method is not handled here
        """
        method_lower = (method or '').lower()
        if method_lower not in HTTP_METHODS:
            return None
        return getattr(self, method_lower)

    @property
    def methods(self) -> List[str]:
        """Upper-case names of the declared methods."""
        return [m.upper() for m in HTTP_METHODS if getattr(self, m) is not None]


@dataclass(frozen=True)
class Schema:
    """A named definition: optional literal example plus typed properties."""

    example: Any = None
    properties: Dict[str, PropertySchema] = field(default_factory=dict)
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'Schema':
        """Create Schema from dictionary, keeping declared property order."""
        data = _as_dict(data)
        properties = {
            name: PropertySchema.from_dict(prop)
            for name, prop in _as_dict(data.get('properties')).items()
        }

        return cls(
            example=data.get('example'),
            properties=properties,
            type=data.get('type')
        )


@dataclass(frozen=True)
class Document:
    """
    Parsed Swagger document.

    ``paths`` is an ordered tuple of ``(template, PathItem)`` pairs. Declaration
    order decides which template wins when several match a request, so it is
    kept explicitly instead of relying on a mapping.

    Example:
        document = Document.from_dict(json.load(f))

        for template, path_item in document.paths:
            print(template, path_item.methods)
    """

    paths: Tuple[Tuple[str, PathItem], ...] = ()
    definitions: Dict[str, Schema] = field(default_factory=dict)
    title: str = ""
    version: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> 'Document':
        """
        Create Document from a parsed Swagger mapping.

        Args:
            data: Parsed JSON/YAML document

        Returns:
            Document instance

        Raises:
            ValueError: If the top-level structure is not a Swagger mapping
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Expected Swagger document to be an object, got {type(data).__name__}"
            )

        raw_paths = data.get('paths', {})
        if not isinstance(raw_paths, dict):
            raise ValueError(
                f"Expected 'paths' to be an object, got {type(raw_paths).__name__}"
            )

        paths = tuple(
            (str(template), PathItem.from_dict(item))
            for template, item in raw_paths.items()
        )
        definitions = {
            name: Schema.from_dict(schema)
            for name, schema in _as_dict(data.get('definitions')).items()
        }
        info = _as_dict(data.get('info'))

        return cls(
            paths=paths,
            definitions=definitions,
            title=str(info.get('title') or ''),
            version=str(info.get('version') or '')
        )

    def resolve_ref(self, ref: Optional[SchemaRef]) -> Optional[Schema]:
        """
        Look up the definition a schema reference points at.

        Args:
            ref: Schema reference (may be None)

        Returns:
            Referenced Schema, or None if it does not resolve
        """
        if ref is None or ref.definition_name is None:
            return None
        return self.definitions.get(ref.definition_name)

    @property
    def templates(self) -> List[str]:
        """Path templates in declaration order."""
        return [template for template, _ in self.paths]
