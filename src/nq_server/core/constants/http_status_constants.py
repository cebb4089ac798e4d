"""Constants for HTTP status messages.

This module contains constants for HTTP status messages so the handlers and
the test suite agree on the exact response text.
"""

# 4xx Client Errors
HTTP_404_NOT_FOUND_MESSAGE = "Not Found"

# 5xx Server Errors
HTTP_503_SERVICE_UNAVAILABLE_MESSAGE = "Service Unavailable"
