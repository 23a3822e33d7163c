"""
S3 storage module for imgvariant.
Writes encoded variants to an S3 bucket.
"""

import logging
from typing import Dict, Any, Optional

import boto3
from botocore.exceptions import ClientError
from mypy_boto3_s3.client import S3Client

from imgvariant.errors import ConfigurationError
from imgvariant.image import ImageProcessor

logger = logging.getLogger(__name__)


class S3Storage:
    """
    Storage collaborator writing variants to S3.
    """

    def __init__(self, config: Dict[str, Any], s3_client: Optional[S3Client] = None):
        """
        Initialize the S3 storage handler with the provided configuration.

        Args:
            config: Configuration dictionary
            s3_client: Client to use instead of one built from config

        Raises:
            ConfigurationError: No bucket is configured
        """
        self.config = config
        self.bucket: str = config["s3"]["bucket"]
        if not self.bucket:
            raise ConfigurationError("S3 bucket name is required")
        self.s3_client: S3Client = s3_client or self._create_s3_client()
        self.url_format: str = self._get_url_format()

    def _create_s3_client(self) -> S3Client:
        """
        Create and return an S3 client using the configuration.

        Returns:
            S3Client: Boto3 S3 client instance
        """
        s3_config = self.config["s3"]

        # Create session with credentials if provided
        session_kwargs = {}
        if s3_config["access_key"] and s3_config["secret_key"]:
            session_kwargs["aws_access_key_id"] = s3_config["access_key"]
            session_kwargs["aws_secret_access_key"] = s3_config["secret_key"]

        if s3_config["region"]:
            session_kwargs["region_name"] = s3_config["region"]

        session = boto3.Session(**session_kwargs)

        client_kwargs = {}
        if s3_config["endpoint"]:
            client_kwargs["endpoint_url"] = s3_config["endpoint"]

        return session.client("s3", **client_kwargs)

    def _get_url_format(self) -> str:
        """
        Determine the S3 URL format based on the configuration.
        """
        s3_config = self.config["s3"]
        endpoint = s3_config["endpoint"]

        if endpoint:
            # Remove http:// or https:// prefix if present
            if endpoint.startswith(("http://", "https://")):
                endpoint = endpoint.split("://")[1]
            return f"https://{self.bucket}.{endpoint}/{{key}}"
        else:
            return f"https://{self.bucket}.s3.{s3_config['region']}.amazonaws.com/{{key}}"

    def write(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        Write bytes to S3.

        Args:
            path: S3 object key
            data: Encoded image bytes
            content_type: Content type, derived from the key's extension if not given

        Returns:
            URL of the written object
        """
        if not content_type:
            content_type = ImageProcessor.get_content_type(path.rsplit(".", 1)[-1])

        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
            logger.info(f"Wrote {len(data)} bytes to s3://{self.bucket}/{path}")
            return self.url_format.format(key=path)

        except ClientError as e:
            logger.error(f"Error writing {path} to S3: {e}")
            raise
