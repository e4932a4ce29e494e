"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real API or reuse a real session secret
os.environ.setdefault("API_URL", "http://api.test")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("LOG_FORMAT", "text")
