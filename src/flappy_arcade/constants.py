"""
constants.py: Centralized configuration for game, render and backend settings.
"""

# -------- Time Config --------
TICK_RATE = 60                  # Physics ticks per second
TICK_TIME = 1.0 / TICK_RATE     # Fixed time step (seconds per tick)
RENDER_FPS = 60                 # Render cadence, independent of TICK_RATE
MAX_TICKS_PER_FRAME = 5         # Catch-up limit after a stalled frame

# -------- Game World Config --------
SCREEN_WIDTH = 800
SCREEN_HEIGHT = 600             # Play-area height (ground strip included)
GROUND_HEIGHT = 50
BIRD_X = 100                    # Fixed bird X position
BIRD_WIDTH = 30
BIRD_HEIGHT = 25
RESPAWN_Y = SCREEN_HEIGHT / 2

# -------- Pipe Config --------
PIPE_WIDTH = 60
PIPE_GAP = 150
PIPE_SPEED = 3.0                # Pixels per tick
PIPE_SPAWN_INTERVAL_TICKS = 120 # Spawn every 120 ticks (2.0 seconds)
PIPE_PRUNE_MARGIN = 100         # Pipes are dropped once this far past the left edge
GAP_MARGIN = 50                 # Minimum distance between gap and ceiling/ground

# -------- Physics Config (pixels / tick) --------
GRAVITY = 0.5
JUMP_STRENGTH = -8.0
DAMPING_FACTOR = 0.98           # Air resistance while falling
TERMINAL_VELOCITY = 10.0
MAX_TILT = 45.0                 # Degrees
TILT_FACTOR = 4.0               # Degrees of tilt per pixel/tick of velocity

# -------- Cosmetic Config --------
CLOUD_COUNT = 6
SCORE_PARTICLES = 12
CRASH_PARTICLES = 30
PARTICLE_LIFE = 40              # Frames

# -------- Persistence Config --------
HIGH_SCORE_KEY = "flappyBirdHighScore"
LAST_PLAYER_KEY = "user-storage"
LOCAL_DB_FILE = "flappy_local.db"
SERVER_DB_FILE = "flappy_server.db"

# -------- Backend Config --------
API_URL = "http://127.0.0.1:8000"
SERVER_HOST = "127.0.0.1"
SERVER_PORT = 8000
SESSION_COOKIE = "flappy_session"
SESSION_MAX_AGE = 7 * 24 * 60 * 60  # 7 days
LEADERBOARD_DEFAULT_LIMIT = 10
LEADERBOARD_MAX_LIMIT = 100
DISPLAY_NAME_MAX_LENGTH = 50
