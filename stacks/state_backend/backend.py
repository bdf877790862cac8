"""
Remote state backend coordinates for the API gateway authorizer module.

The authorizer is provisioned by a separate Terraform module whose state
lives in S3 with a DynamoDB lock table. This module only carries and checks
the coordinates; the bucket and table are managed elsewhere.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from stacks.common.exceptions import StackConfigurationError, ValidationError
from stacks.common.validators import AWSResourceValidator

REGION_PATTERN = re.compile(r'^[a-z]{2}(-gov)?-[a-z]+-[0-9]$')
LOCK_TABLE_PATTERN = re.compile(r'^[a-zA-Z0-9_.-]{3,255}$')


@dataclass(frozen=True)
class RemoteStateBackend:
    """S3 state location plus the DynamoDB table used for state locking."""

    bucket: str
    key: str
    region: str
    lock_table: str
    encrypt: bool = True

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "RemoteStateBackend":
        """
        Build backend coordinates from the AuthorizerStateBackend config section.

        Raises:
            StackConfigurationError: If the section or one of its keys is missing
        """
        if not section:
            raise StackConfigurationError(
                "AuthorizerStateBackend section is missing",
                config_key="AuthorizerStateBackend"
            )

        missing = [key for key in ('Bucket', 'Key', 'Region', 'LockTable') if not section.get(key)]
        if missing:
            raise StackConfigurationError(
                f"AuthorizerStateBackend is missing: {', '.join(missing)}",
                config_key=f"AuthorizerStateBackend.{missing[0]}"
            )

        encrypt = section.get('Encrypt', True)

        return cls(
            bucket=section['Bucket'],
            key=section['Key'],
            region=section['Region'],
            lock_table=section['LockTable'],
            encrypt=True if encrypt is None else bool(encrypt)
        )

    def validate(self) -> None:
        """
        Check the coordinates are well formed.

        Raises:
            ValidationError: If any coordinate is malformed
        """
        AWSResourceValidator.validate_s3_bucket_name(self.bucket)

        if not self.key or self.key.startswith('/') or self.key.endswith('/'):
            raise ValidationError(
                f"State key must be a relative object key, got '{self.key}'",
                parameter_name="key",
                provided_value=self.key
            )

        if not REGION_PATTERN.match(self.region):
            raise ValidationError(
                f"Invalid region: {self.region}",
                parameter_name="region",
                provided_value=self.region
            )

        if not LOCK_TABLE_PATTERN.match(self.lock_table):
            raise ValidationError(
                f"Invalid DynamoDB lock table name: {self.lock_table}",
                parameter_name="lock_table",
                provided_value=self.lock_table
            )

    def as_backend_config(self) -> Dict[str, str]:
        """Backend settings as passed to `terraform init -backend-config`."""
        return {
            "bucket": self.bucket,
            "key": self.key,
            "region": self.region,
            "dynamodb_table": self.lock_table,
            "encrypt": str(self.encrypt).lower()
        }
