"""
Pytest configuration for ATS Auth Service tests.
Sets up the Python path and test environment variables.
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path for all tests
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("JWT_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
