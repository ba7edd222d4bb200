"""
SNApp Backend: Middleware
===========================

Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → route

The request id is assigned first so every response, 429s included, carries
it. Rate limiting comes next so rejected callers cost nothing downstream.
"""
