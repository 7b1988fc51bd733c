# ── Central defaults (tune here, not scattered across files) ──

# World
BOX_SIZE = 1.0
RADIUS = 0.01
MASS = 0.5
SPEED_RANGE = (-0.5, 0.5)
COLOR = (0, 0, 0)

# Radius upscaling (cosmetic, applied when particles are built)
UPSCALE_RADII = False
MIN_VISIBLE_RADIUS = 0.004

# Simulation
LIMIT = 10000.0
HZ = 0.5
SEED = 42
MAX_PLACEMENT_ATTEMPTS = 100

# Rendering
RESOLUTION = 1000
BG_COLOR = (255, 255, 255)
PAUSE_MS = 20
