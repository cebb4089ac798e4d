"""Constants for the public HTTP surface."""

API_PREFIX = "/api/v1"

CONFIG_PATH = f"{API_PREFIX}/config"
SMALL_DOWNLOAD_PATH = f"{API_PREFIX}/small"
LARGE_DOWNLOAD_PATH = f"{API_PREFIX}/large"
UPLOAD_PATH = f"{API_PREFIX}/upload"

# Keys of the ``urls`` mapping in the configuration document
SMALL_DOWNLOAD_URL_KEY = "small_download_url"
LARGE_DOWNLOAD_URL_KEY = "large_download_url"
UPLOAD_URL_KEY = "upload_url"

CONFIG_DOCUMENT_VERSION = 1

OCTET_STREAM_MEDIA_TYPE = "application/octet-stream"
