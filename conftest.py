"""Pytest configuration and fixtures.

This file sets up the Python path so tests can import from the backend package
and share the in-memory fakes under tests/.
"""

import sys
from pathlib import Path

# Add backend directory to Python path for imports
backend_path = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_path))

# Shared test doubles (tests/fakes.py)
tests_path = Path(__file__).parent / "tests"
sys.path.insert(0, str(tests_path))
