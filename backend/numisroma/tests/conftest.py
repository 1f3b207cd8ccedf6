"""Shared fixtures for API tests."""

import os

# AuthSettings requires AUTH_JWT_SECRET. Set a test default
# before any AuthSettings is instantiated.
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-0123456789abcdef0123")
