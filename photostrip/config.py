# config.py
"""
Configuration constants for the photostrip layout engine
"""

import os

# Print geometry (pixel values are expressed at PRINT_DPI)
PRINT_DPI = 300
PAPER_WIDTH_IN = 4
PAPER_HEIGHT_IN = 6
SAFE_MARGIN_PX = 20
STRIP_GAP_PX = 20

# Box editing
MIN_BOX_SIZE = 10.0              # Percent of the reference canvas
MAX_BOXES = 8
NEW_BOX_GEOMETRY = (10.0, 10.0, 40.0, 20.0)  # x, y, width, height

# Snapping
SNAP_THRESHOLD = 2.0
MARGIN_GUIDES = (5.0, 10.0)
EDITOR_SNAP_THRESHOLD = 3.0      # Interactive canvas uses a looser threshold
EDITOR_MARGIN_GUIDES = (5.0,)

# Composition
QUALITY_DEFAULT = 0.95
OUTPUT_FORMAT = "JPEG"
SUPPORTED_OUTPUT_FORMATS = ["JPEG", "PNG", "WEBP"]
PAPER_COLOR = "#ffffff"
DEFAULT_BACKGROUND_COLOR = "#ffffff"
PLACEHOLDER_RGBA = (200, 200, 200, 77)  # rgba(200, 200, 200, 0.3)
PREVIEW_HEIGHT = 400

# Cut marks
CUT_MARK_COLOR = "#888888"
CUT_MARK_WIDTH = 1
CUT_MARK_DASH = (10, 10)
CUT_MARK_TICK_LENGTH = 30
CUT_MARK_TICK_INSET = 5

# Theme border dash pattern (dash, gap) in pixels
BORDER_DASH = (5, 5)

# Supported image formats for photo and asset inputs
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']
MAX_IMAGE_DIMENSION = 10000

# Decode cache settings
MAX_CACHE_SIZE = 32
CACHE_CLEANUP_THRESHOLD = 0.8  # Cleanup when cache reaches 80% of max size

# Memory guard
MEMORY_THRESHOLD_BYTES = 500 << 20  # 500 MB

# Logging
LOGGER_NAME = "photostrip"
LOG_LEVEL = os.environ.get("PHOTOSTRIP_LOG_LEVEL", "INFO").upper()
LOG_DIR = os.environ.get("PHOTOSTRIP_LOG_DIR", "logs")
LOG_FILE = "photostrip.log"
LOG_MAX_BYTES = 1 << 20
LOG_BACKUP_COUNT = 3
