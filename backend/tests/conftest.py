"""Pytest configuration for AskDeploy backend tests."""
import sys
from pathlib import Path

# Ensure the backend package and the shared fakes are importable
tests_root = Path(__file__).resolve().parent
backend_root = tests_root.parent
for path in (backend_root, tests_root):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
