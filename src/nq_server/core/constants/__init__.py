"""Constants module for the network quality server.

This module contains constants used throughout the application and tests
to make the codebase more maintainable and the tests less fragile.
"""

from .api_constants import *  # noqa: F403
from .http_status_constants import *  # noqa: F403
from .streaming_constants import *  # noqa: F403
