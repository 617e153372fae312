"""
objectgate - an HTTP gateway over an S3-compatible object store.

This package contains the complete application:
- core: Framework-agnostic object access logic and the post register
- infrastructure: Object store client
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
