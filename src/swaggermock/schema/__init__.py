"""
SwaggerMock Schema Module

In-memory model of a parsed Swagger document.
"""

from .models import (
    Document,
    PathItem,
    Operation,
    Response,
    SchemaRef,
    Schema,
    PropertySchema,
    HTTP_METHODS,
    DEFINITIONS_PREFIX
)

__all__ = [
    'Document',
    'PathItem',
    'Operation',
    'Response',
    'SchemaRef',
    'Schema',
    'PropertySchema',
    'HTTP_METHODS',
    'DEFINITIONS_PREFIX',
]
