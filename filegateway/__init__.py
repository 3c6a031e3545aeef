"""
File gateway - upload, list, download and delete files in an S3 bucket.

This package contains the complete application:
- core: Framework-agnostic file domain and error taxonomy
- infrastructure: Object storage integration (boto3)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "1.0.0"
