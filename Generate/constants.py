# Centralized constants and defaults for city generation

VERSION = "v1"

# Sampler service
STATS_URL_DEFAULT = "http://localhost:8000"
STATS_TIMEOUT_S = 10.0
USER_AGENT = "cityservice"

# Service admission control
SIMULTANEOUS_JOBS_DEFAULT = 3

# Sample requests issued at once within a phase
SAMPLE_WORKERS_DEFAULT = 6

# Distribution kinds understood by the pipeline
DISTRIBUTIONS = ("constant", "uniform", "normal")

# Building height is carried on the model but not sampled
BUILDING_HEIGHT_DEFAULT = 0.0

# Largest image side accepted from a request, in pixels
IMAGE_MAX_SIDE = 8192

# Palette (RGBA)
ASPHALT_COLOR = (0x20, 0x20, 0x20, 0xFF)
CONCRETE_COLOR = (0xA0, 0xA0, 0xA0, 0xFF)
ROOF_EDGE_COLOR = (0x50, 0x50, 0x50, 0xFF)
ROOF_BASE_COLOR = (0x90, 0x90, 0x90, 0xFF)
ROOF_TINT_COLOR = (0xB0, 0x5A, 0x3C, 0xFF)
BACKGROUND_COLOR = (0x00, 0x00, 0x00, 0xFF)

JPEG_QUALITY = 90
