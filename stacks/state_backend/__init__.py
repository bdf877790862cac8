"""
Remote state backend package.

Carries the S3/DynamoDB coordinates of the API gateway authorizer module's
state and publishes them to SSM Parameter Store.
"""

from .backend import RemoteStateBackend
from .stack import AuthorizerStateBackendStack

__all__ = [
    "RemoteStateBackend",
    "AuthorizerStateBackendStack"
]
