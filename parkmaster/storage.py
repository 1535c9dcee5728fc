"""
Object storage abstraction for S3-compatible buckets and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
import json

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class StorageClient(Protocol):
    """Defines the operations the backup mirror needs from object storage."""

    def upload_json(self, path: str, payload: dict) -> None:
        ...

    def get_bytes(self, path: str) -> bytes:
        """Return the object body; raise FileNotFoundError if it is absent."""
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_json(self, path: str, payload: dict) -> None:
        # Store the encoded body to mimic real upload behavior
        self.stored_objects[path] = json.dumps(payload, indent=2).encode("utf-8")

    def get_bytes(self, path: str) -> bytes:
        stored = self.stored_objects.get(path)
        if stored is None:
            raise FileNotFoundError(path)
        return stored


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client.

    Works against AWS S3 and gateways that speak the S3 protocol, such as
    Supabase Storage (`https://<project>.supabase.co/storage/v1/s3`).
    """

    bucket: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    region: Optional[str] = None

    def __post_init__(self):
        # Path-style addressing keeps the bucket out of the hostname, which
        # non-AWS gateways require.
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def upload_json(self, path: str, payload: dict) -> None:
        body = json.dumps(payload, indent=2).encode("utf-8")
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=body,
            ContentType="application/json",
        )

    def get_bytes(self, path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=path)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                raise FileNotFoundError(path) from exc
            raise
        return response["Body"].read()
