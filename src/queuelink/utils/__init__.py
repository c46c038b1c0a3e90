"""
Module: utils
Description: Shared helpers.

- logger: Structured logging configuration and helpers
- xml_document: Namespace-free response document lookups
- batch_helpers: Grouping for batch sends
"""

__all__ = []
