"""
Park Master backend.

A FastAPI service that keeps parking-lot records as JSON documents on local
disk and mirrors an aggregate snapshot to S3-compatible object storage.
"""
