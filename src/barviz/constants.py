# --- Video Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1280, 360)
BACKGROUND_COLOR = (10, 10, 15)  # BGR, very dark blue-grey

# --- Audio Analysis ---
N_FFT = 2048
HOP_LENGTH = 512
SILENCE_FLOOR_DB = -160.0  # Reported for frames past the end of the file

# --- Bar Geometry ---
BAR_WIDTH = 10.0
BAR_SPACING = 4.0
BAR_CORNER_RADIUS = -1.0  # Negative means derive from the bar width
CORNER_RADIUS_DIVISOR = 3
BAR_COLOR = (147, 142, 142)  # BGR, close to systemGray

# --- Decay ---
DECAY_SPEED = 0.01  # Seconds between ticks
DECAY_AMOUNT = 0.8  # Newest value is multiplied by this every tick
ENERGY_EPSILON = 1e-6  # Ticking stops once history energy drops to this
