"""
Package: auth
Description: Request signing.

- signature: AWS Signature Version 4 canonical request, key chain and
  Authorization header
"""

__all__ = []
