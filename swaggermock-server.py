#!/usr/bin/env python3
"""
SwaggerMock - Mock HTTP backend driven by a Swagger document

This is a convenience wrapper that calls the packaged implementation.
The actual implementation is in src/swaggermock/cli.py

Usage:
    python swaggermock-server.py serve swagger.json --port 8080

For more information, run: python swaggermock-server.py --help
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from swaggermock.cli import main

if __name__ == '__main__':
    main()
