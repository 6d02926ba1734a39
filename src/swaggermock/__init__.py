"""
SwaggerMock

Mock HTTP backend driven by a Swagger (OpenAPI 2.0) document.
"""

__version__ = '1.0.0'
