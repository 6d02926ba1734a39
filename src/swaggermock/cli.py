"""
SwaggerMock CLI

Command-line interface for the SwaggerMock mock server.

Commands:
    serve       - Start mock HTTP server
    generate    - Print the mock response for one request
    routes      - List path templates in match order

Examples:
    # Serve a local document without bearer token checks
    swaggermock serve swagger.json --port 8080 --no-auth

    # Serve a remote document (or set SWAGGERMOCK_DOCUMENT)
    swaggermock serve https://example.com/swagger.json

    # Preview a response
    swaggermock generate GET /notification/webhooks/123 -d swagger.json
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .common import DocumentProvider, DocumentFetchError, get_document_source_from_env, DOCUMENT_ENV_VAR
from .mock import MockServer, MockConfig, MockGenerator, MockRequest, OperationResolver
from .schema import Document


def _resolve_source(source: Optional[str]) -> str:
    """Pick the document source from the argument or the environment, or exit."""
    actual_source = source or get_document_source_from_env()
    if not actual_source:
        print(f"❌ No Swagger document given")
        print(f"   Pass a file path or URL, or set it with: export {DOCUMENT_ENV_VAR}=swagger.json")
        sys.exit(1)
    return actual_source


def _load_document(source: str, timeout: float = 30.0) -> Document:
    """Load a document for one-shot commands, exiting on failure."""
    try:
        return DocumentProvider(source, timeout=timeout).get_sync()
    except (DocumentFetchError, OSError, ValueError) as e:
        print(f"❌ Failed to load Swagger document: {e}")
        sys.exit(1)


def cmd_serve(args):
    """
    Start mock HTTP server.

    Args:
        args: Parsed command-line arguments
    """
    print(f"🎭 SwaggerMock Server")

    source = _resolve_source(args.document)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if args.verbose:
        print(f"📋 Verbose mode enabled (request resolution logging)")

    config = MockConfig(
        document_source=source,
        host=args.host,
        port=args.port,
        auth_enabled=not args.no_auth,
        token_path=args.token_path,
        admin_enabled=not args.no_admin,
        fetch_timeout=args.timeout,
        preload=args.preload,
        log_level=args.log_level,
        verbose_mode=args.verbose
    )

    # Create server
    try:
        server = MockServer(config=config)
    except (DocumentFetchError, OSError, ValueError) as e:
        print(f"❌ Failed to create mock server: {e}")
        sys.exit(1)

    # Start server (blocking)
    try:
        server.start()
    except KeyboardInterrupt:
        print("\n\n👋 Mock server stopped")


def cmd_generate(args):
    """
    Print the mock response the server would give for one request.

    Args:
        args: Parsed command-line arguments
    """
    source = _resolve_source(args.document)
    document = _load_document(source, args.timeout)

    generator = MockGenerator(document)
    response = generator.generate(MockRequest.from_url(args.method, args.path))

    status_emoji = "✅" if response.matched else "❌"
    print(f"{status_emoji} {args.method.upper()} {args.path} -> {response.status_code}")
    if response.template:
        print(f"   Template: {response.template}")
    print(f"   Source: {response.source}")
    if response.reason:
        print(f"   Reason: {response.reason}")

    if response.body is not None:
        print()
        print(json.dumps(response.body, indent=2))


def cmd_routes(args):
    """
    List the document's path templates in match order.

    Args:
        args: Parsed command-line arguments
    """
    source = _resolve_source(args.document)
    document = _load_document(source, args.timeout)

    resolver = OperationResolver(document)
    invalid = {e.template: e.reason for e in resolver.invalid_templates}

    print(f"📚 {document.title or 'Swagger document'} {document.version}".rstrip())
    print(f"   Paths: {len(document.paths)}")
    print()

    for template, path_item in document.paths:
        methods = ', '.join(path_item.methods) or '(none)'
        if template in invalid:
            print(f"  ⚠️  {template}  [{methods}]")
            print(f"      Skipped: {invalid[template]}")
        else:
            print(f"  • {template}  [{methods}]")

    if invalid:
        print()
        print(f"⚠️  {len(invalid)} template(s) will only match exactly")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SwaggerMock - Mock HTTP backend driven by a Swagger document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Start mock server
  %(prog)s serve swagger.json --port 8080

  # Start mock server without bearer token checks
  %(prog)s serve swagger.json --no-auth

  # Preview the response for a request
  %(prog)s generate GET /users/123 -d swagger.json

  # List path templates in match order
  %(prog)s routes swagger.json

The document can also be given with {DOCUMENT_ENV_VAR}.
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start mock HTTP server')
    serve_parser.add_argument('document', nargs='?', help='Swagger document file or URL')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, default=8080, help='Port to bind (default: 8080)')
    serve_parser.add_argument('--no-auth', action='store_true', help='Disable bearer token checks')
    serve_parser.add_argument('--token-path', default='/oauth/connect/token',
                              help='Path of the mocked OAuth token endpoint (default: /oauth/connect/token)')
    serve_parser.add_argument('--no-admin', action='store_true', help='Disable admin API')
    serve_parser.add_argument('--timeout', type=float, default=30.0,
                              help='Timeout in seconds for remote documents (default: 30)')
    serve_parser.add_argument('--preload', action='store_true', help='Load the document before serving')
    serve_parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'],
                              help='Log level (default: info)')
    serve_parser.add_argument('--verbose', action='store_true', help='Show each request and its resolution')

    # --- GENERATE command ---
    generate_parser = subparsers.add_parser('generate', help='Print the mock response for one request')
    generate_parser.add_argument('method', help='HTTP method (GET, POST, PUT, PATCH, DELETE)')
    generate_parser.add_argument('path', help='Request path, optionally with query string')
    generate_parser.add_argument('-d', '--document', help='Swagger document file or URL')
    generate_parser.add_argument('--timeout', type=float, default=30.0,
                                 help='Timeout in seconds for remote documents (default: 30)')

    # --- ROUTES command ---
    routes_parser = subparsers.add_parser('routes', help='List path templates in match order')
    routes_parser.add_argument('document', nargs='?', help='Swagger document file or URL')
    routes_parser.add_argument('--timeout', type=float, default=30.0,
                               help='Timeout in seconds for remote documents (default: 30)')

    args = parser.parse_args()

    # Dispatch to command handler
    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'generate':
        cmd_generate(args)
    elif args.command == 'routes':
        cmd_routes(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == '__main__':
    main()
