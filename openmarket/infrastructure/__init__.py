"""Infrastructure adapters for OpenMarket.

Subpackages:
  - ``http`` – async client for the open-market product API.
  - ``observability`` – logging and in-process metrics.
"""
