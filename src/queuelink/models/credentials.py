"""
Module: credentials.py
Description: Access key / secret key pair used for request signing.
"""

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """
    Immutable access key and secret key pair.

    Credentials are always passed explicitly to the client; there is no
    process-wide default.

    Attributes:
        access_key: Public access key id, sent in the Authorization header
        secret_key: Secret key, only ever used to derive the signing key
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    access_key: str = Field(..., min_length=1, description="Access key id")
    secret_key: str = Field(
        ..., min_length=1, repr=False, description="Secret access key"
    )
