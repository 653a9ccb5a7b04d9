"""
Encoder argument constants.

These values are part of the observable output contract and are not meant to
be user preferences. User-configurable values go in config.yaml instead.
"""

# Still images (libwebp through ffmpeg)
WEBP_CODEC = "libwebp"
WEBP_EXTENSION = ".webp"
WEBP_RESIZE_QUALITY = 85
WEBP_RESIZE_COMPRESSION_LEVEL = 4
WEBP_COMPRESS_QUALITY = 80
WEBP_COMPRESS_COMPRESSION_LEVEL = 6

# Video (H.264 + AAC in MP4)
VIDEO_CODEC = "libx264"
VIDEO_EXTENSION = ".mp4"
VIDEO_CRF = 23
VIDEO_PRESET = "medium"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "128k"
FASTSTART_FLAGS = "+faststart"

# Ghostscript
PDF_EXTENSION = ".pdf"
PDF_COMPATIBILITY_LEVEL = "1.4"
PDF_DOWNSAMPLE_TYPE = "/Bicubic"

# Output naming
RESIZED_SUFFIX = ".resized"
COMPRESSED_SUFFIX = ".min"

# Output-buffer ceilings for captured stdout+stderr
IMAGE_MAX_BUFFER = 10 * 1024 * 1024
VIDEO_MAX_BUFFER = 50 * 1024 * 1024
PDF_MAX_BUFFER = 50 * 1024 * 1024

# Progress milestones (percent of a single transform)
PROGRESS_ANALYZING = 10
PROGRESS_TRANSFORMING = 40
PROGRESS_FINALIZING = 90
PROGRESS_COMPLETE = 100

# Tool discovery
UPWARD_SEARCH_DEPTH = 4
VENDOR_DIR_NAMES = ("vendor", "bin", "tools")

# Presentation
FAILURE_LISTING_MAX_LENGTH = 200
VERBOSE_LOGGING_THRESHOLD = 2
