"""Internal modules for httpdispatch.

Modules:
    dispatch - Worker pool, request execution and callback delivery
    http - Shared HTTP client configuration
"""
