"""
Configuration constants for the preview generator.
"""

# --- Traversal ---
# A folder containing this entry is excluded, together with its whole subtree.
SKIP_MARKER = '.nomedia'

# --- Size Buckets ---
BUCKET_SQUARE = 'square'
BUCKET_HEIGHT = 'height'
BUCKET_WIDTH = 'width'
BUCKETS = (BUCKET_SQUARE, BUCKET_HEIGHT, BUCKET_WIDTH)

# Default sizes are powers of 4 starting here, up to the max preview size
DEFAULT_MIN_SIZE = 64
DEFAULT_SIZE_FACTOR = 4
DEFAULT_PREVIEW_MAX = 4096

# Sentinel for "scale to match the other dimension"
UNBOUNDED = -1

# --- Config Keys ---
APP_ID = 'previewgenerator'
SYSTEM_APP_ID = 'system'
CORE_APP_ID = 'core'

BUCKET_CONFIG_KEYS = {
    BUCKET_SQUARE: 'squareSizes',
    BUCKET_HEIGHT: 'heightSizes',
    BUCKET_WIDTH: 'widthSizes',
}
KEY_PREVIEW_MAX_X = 'preview_max_x'
KEY_PREVIEW_MAX_Y = 'preview_max_y'
KEY_JPEG_QUALITY = 'preview_jpeg_quality'
KEY_ENCRYPTION_ENABLED = 'encryption_enabled'
KEY_LOG_TIMEZONE = 'logtimezone'
KEY_LOG_DATE_FORMAT = 'logdateformat'

# --- Output ---
VERBOSITY_NORMAL = 0
VERBOSITY_VERBOSE = 1

DEFAULT_LOG_TIMEZONE = 'UTC'
DEFAULT_JPEG_QUALITY = 80

# --- Storage Layout ---
USER_FILES_DIR = 'files'
APPDATA_PREVIEW_DIR = ('appdata', 'preview')
CATALOG_NAME = 'preview_catalog.db'
DATA_DIR_ENV = 'PREVIEWGEN_DATA_DIR'

# --- File Type Definitions ---
DEFAULT_MIME = 'application/octet-stream'
JPEG_MIME = 'image/jpeg'
PSD_MIME = 'image/vnd.adobe.photoshop'

# Extension to MIME Mapping
EXT_TO_MIME = {
    '.jpg': JPEG_MIME,
    '.jpeg': JPEG_MIME,
    '.jpe': JPEG_MIME,
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.bmp': 'image/bmp',
    '.webp': 'image/webp',
    '.tif': 'image/tiff',
    '.tiff': 'image/tiff',
    '.psd': PSD_MIME,
    '.psb': PSD_MIME,
    '.mp4': 'video/mp4',
    '.mov': 'video/quicktime',
    '.txt': 'text/plain',
    '.pdf': 'application/pdf',
}

# MIME types the Pillow backed renderer can decode
PILLOW_MIMES = {
    JPEG_MIME, 'image/png', 'image/gif', 'image/bmp', 'image/webp', 'image/tiff',
}
SUPPORTED_MIMES = PILLOW_MIMES | {PSD_MIME}
