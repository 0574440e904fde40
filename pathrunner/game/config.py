# pathrunner/game/config.py
# --- Display ---
WIDTH = 480
HEIGHT = 720
FPS = 60
MAX_DT = 1.0 / 30.0         # clamp stalls (sec)

# --- Path generation (normalized 0..1 surface units) ---
TOTAL_SEGMENTS = 7          # slices visible on screen at once
SEGMENT_PITCH = 1.0 / TOTAL_SEGMENTS
VERTICAL_OVERLAP = 0.005    # overlap above/below each slice so no seam shows
BASE_PATH_WIDTH = 0.3
MIN_PATH_WIDTH = 0.2
MAX_PATH_WIDTH = 0.4
LATERAL_MIN_X = 0.05
LATERAL_MAX_X = 0.95
WIDTH_DRIFT_PER_LEVEL = 0.02
MIN_OVERLAP_RATIO = 0.3     # of the narrower of two neighbouring segments
INITIAL_MAX_SHIFT = 0.05    # lateral freedom while laying out the first screen
WIDTH_GROWTH_FACTOR = 1.5
SCROLL_SPEED = 1.5          # constant; segment pitches per second x TOTAL_SEGMENTS
SEED_DEFAULT = 12345

# --- Difficulty / patterns ---
MAX_DIFFICULTY = 5
SCORE_PER_LEVEL = 500
PATTERN_SWITCH_MIN = 300    # score points between pattern switches
PATTERN_SWITCH_SPREAD = 200
PATTERN_BANNER_S = 2.0

# --- Obstacles ---
OBSTACLE_MIN_SCORE = 200
OBSTACLE_COOLDOWN = 100     # score points between spawns
OBSTACLE_CHANCE = 0.005     # per tick, scaled by (1 + 0.2 * difficulty)
OBSTACLE_ROW_HEIGHT = 0.1
OBSTACLE_MAX_Y = 0.5
OBSTACLE_MIN_SEGMENT_W = 0.25
OBSTACLE_MAX_SIZE = 0.05
OBSTACLE_BONUS = 50

# --- Projectiles ---
PROJECTILE_MIN_SCORE = 300
PROJECTILE_COOLDOWN = 150
PROJECTILE_CHANCE = 0.002
PROJECTILE_AIM_SPREAD = 0.2      # full width of the random offset around the player
PROJECTILE_SIZE_PX = 15
PROJECTILE_START_Y = -0.02
PROJECTILE_BASE_SPEED = 0.3      # surface heights per second, x difficulty
PROJECTILE_SPEED_JITTER = 0.2
PROJECTILE_WARNING_S = 1.0
PROJECTILE_LIFETIME_S = 4.0
PROJECTILE_PASS_Y = 0.7          # absolute threshold, not relative to the player
PROJECTILE_FADE_S = 0.3
SPAWN_DIFFICULTY_SCALE = 0.2

# --- Player ---
PLAYER_RADIUS = 12               # px
PLAYER_START_Y = 0.85            # fraction of HEIGHT
PLAYER_BASE_SPEED = 2.0          # px per tick at full deflection
PLAYER_SPEEDUP = 0.1             # added every SPEEDUP_EVERY points
SPEEDUP_EVERY = 100
PLAYER_SENSITIVITY = 0.5
ON_PATH_FRACTION = 0.6

# --- Colors (RGB) ---
COLOR_BG = (9, 14, 28)
COLOR_FG = (220, 232, 255)
COLOR_PATH = (33, 46, 68)
COLOR_BLUE = (70, 140, 255)
COLOR_GREEN = (60, 200, 120)
COLOR_BULLET = (255, 86, 110)
COLOR_WARNING = (255, 200, 60)
COLOR_DANGER = (255, 86, 110)
