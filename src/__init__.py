"""
Product Image API - image storage for the storefront product catalog.

This package contains the complete application:
- core: Framework-agnostic image resolution logic
- infrastructure: Object storage, local disk and product records
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
