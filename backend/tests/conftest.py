"""Root conftest — shared test configuration."""

import os

# Keep test runs independent of a developer's .env / shell
os.environ.setdefault("DYNAMIC_API_BASE_ROUTE", "/api")
os.environ.setdefault("DYNAMIC_API_LOG_FORMAT", "text")
