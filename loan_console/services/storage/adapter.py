import hashlib
import hmac
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Any, Callable
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)

LOCAL_CONTENT_PATH = "/api/v1/uploads/local-content"


def _sign_local_url(secret_key: str, object_key: str, expires: int) -> str:
    """HMAC-SHA256 signature for a local storage URL."""
    message = f"{object_key}:{expires}"
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_local_url_signature(
    secret_key: str, object_key: str, expires: int, signature: str
) -> bool:
    """False when the signature does not match or the URL has expired."""
    if int(time.time()) > expires:
        return False
    expected = _sign_local_url(secret_key, object_key, expires)
    return hmac.compare_digest(expected, signature)


class StorageAdapter(ABC):
    provider: str = "local"
    bucket: str | None = None

    @abstractmethod
    def put_object(self, object_key: str, content: bytes, content_type: str) -> str:
        """Store the bytes and return the URL the console hands back to forms."""


class LocalFileSystemAdapter(StorageAdapter):
    def __init__(self, base_path: str, base_url: str, *, signing_key: str = "", url_ttl_seconds: int = 7 * 24 * 3600):
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")
        self.signing_key = signing_key
        self.url_ttl_seconds = url_ttl_seconds
        self.provider = "local"
        self.bucket = "local"
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _resolve_safe_path(self, object_key: str) -> Path:
        if "\\" in object_key:
            raise ValueError("Invalid object key")
        key_path = PurePosixPath(object_key)
        if key_path.is_absolute() or ".." in key_path.parts:
            raise ValueError("Invalid object key")
        base = self.base_path.resolve()
        resolved = (base / Path(object_key)).resolve()
        if resolved != base and base not in resolved.parents:
            raise ValueError("Invalid object key")
        return resolved

    def resolve_path(self, object_key: str) -> Path:
        return self._resolve_safe_path(object_key)

    def put_object(self, object_key: str, content: bytes, content_type: str) -> str:
        path = self._resolve_safe_path(object_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return self._signed_url(object_key)

    def _signed_url(self, object_key: str) -> str:
        expires = int(time.time()) + self.url_ttl_seconds
        sig = _sign_local_url(self.signing_key, object_key, expires)
        params = urlencode({"key": object_key, "expires": expires, "signature": sig})
        return f"{self.base_url}{LOCAL_CONTENT_PATH}?{params}"


class S3StorageAdapter(StorageAdapter):
    """S3 uploads signed with temporary credentials from a Cognito identity pool.

    When no identity pool is configured the default boto3 credential chain is
    used instead.
    """

    def __init__(
        self,
        bucket: str,
        *,
        region: str,
        identity_pool_id: str | None = None,
        client_factory: Callable[..., Any] | None = None,
    ):
        # Lazy import to avoid requiring dependency unless used
        import boto3

        self.provider = "s3"
        self.bucket = bucket
        self.region = region
        self.identity_pool_id = identity_pool_id
        self._client_factory = client_factory or boto3.client
        self._s3 = None

    def _federated_credentials(self) -> dict[str, str]:
        cognito = self._client_factory("cognito-identity", region_name=self.region)
        identity = cognito.get_id(IdentityPoolId=self.identity_pool_id)
        response = cognito.get_credentials_for_identity(IdentityId=identity["IdentityId"])
        credentials = response["Credentials"]
        logger.info("Obtained federated storage credentials for identity %s", identity["IdentityId"])
        return {
            "aws_access_key_id": credentials["AccessKeyId"],
            "aws_secret_access_key": credentials["SecretKey"],
            "aws_session_token": credentials["SessionToken"],
        }

    def _client(self):
        if self._s3 is None:
            kwargs: dict[str, Any] = {"region_name": self.region}
            if self.identity_pool_id:
                kwargs.update(self._federated_credentials())
            self._s3 = self._client_factory("s3", **kwargs)
        return self._s3

    def object_url(self, object_key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(object_key)}"

    def put_object(self, object_key: str, content: bytes, content_type: str) -> str:
        self._client().put_object(
            Bucket=self.bucket,
            Key=object_key,
            Body=content,
            ContentType=content_type,
        )
        return self.object_url(object_key)
