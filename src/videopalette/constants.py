# Frame reduction target height (pixels)
RESIZE_HEIGHT = 12

# Pixel filter thresholds, 0.0 keeps every pixel
SATURATION_THRESHOLD = 0.0
LUMINANCE_THRESHOLD = 0.0

# Near-white / near-black cut-offs used when extremes are excluded
WHITE_THRESHOLD = 250
BLACK_THRESHOLD = 5

# KMeans clustering settings
COLOR_CLUSTERS = 5
MAX_ITERATIONS = 100
ASSIGNMENT_CHUNK_SIZE = 65536

# Decode/filter pipeline settings
WORKERS = 4
FRAME_QUEUE_SIZE = 16
QUEUE_POLL_INTERVAL_SEC = 0.1

# Number of distinct colors reported alongside the palette
TOP_COLORS = 10
