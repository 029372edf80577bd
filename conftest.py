"""
Root conftest.py for the fleet project.

Makes each service's ``app`` package importable when its tests are run
from the repository root.
"""

import sys
from pathlib import Path

SERVICES_DIR = Path(__file__).parent / "services"


def pytest_configure(config):
    """
    Add service directories to sys.path.

    Runs before test modules are collected, so ``from app...`` imports in
    service tests resolve against the service being tested.
    """
    for service_path in sorted(SERVICES_DIR.iterdir()):
        if (service_path / "app").is_dir() and str(service_path) not in sys.path:
            sys.path.insert(0, str(service_path))
