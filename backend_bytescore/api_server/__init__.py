"""
API server package: HTTP interface to the ByteScore engine.

Thin request/response glue; scoring and fallback live in backend_bytescore.analytics.
"""
