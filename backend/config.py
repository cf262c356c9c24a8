import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///arena.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Room rules
    ARENA_MAX_PLAYERS = int(os.environ.get('ARENA_MAX_PLAYERS', '8'))
    ARENA_OBSTACLE_COUNT = int(os.environ.get('ARENA_OBSTACLE_COUNT', '30'))
    ARENA_MAX_HEALTH = int(os.environ.get('ARENA_MAX_HEALTH', '100'))
    # Powerups (milliseconds)
    ARENA_POWERUP_SPAWN_INTERVAL_MS = int(os.environ.get('ARENA_POWERUP_SPAWN_INTERVAL_MS', '10000'))
    ARENA_POWERUP_EXPIRY_MS = int(os.environ.get('ARENA_POWERUP_EXPIRY_MS', '30000'))
    ARENA_POWERUP_TYPES = os.environ.get('ARENA_POWERUP_TYPES', 'health,speed')
    # World geometry; spawn points and obstacles are drawn from [SPAWN_MIN, SPAWN_MAX)
    ARENA_SPAWN_MIN = int(os.environ.get('ARENA_SPAWN_MIN', '100'))
    ARENA_SPAWN_MAX = int(os.environ.get('ARENA_SPAWN_MAX', '1900'))
    ARENA_WORLD_SIZE = int(os.environ.get('ARENA_WORLD_SIZE', '2000'))
    ARENA_BORDER_STEP = int(os.environ.get('ARENA_BORDER_STEP', '50'))
    # Room tick cadence (ms)
    ARENA_TICK_INTERVAL_MS = int(os.environ.get('ARENA_TICK_INTERVAL_MS', '1000'))
    # Debug hook: let clients request a powerup spawn over the socket. 0 disables.
    ARENA_ALLOW_CLIENT_SPAWN = int(os.environ.get('ARENA_ALLOW_CLIENT_SPAWN', '0'))
    # Optional: heartbeat interval for tick loop logs (sec). 0 disables.
    TICK_HEARTBEAT_SEC = int(os.environ.get('TICK_HEARTBEAT_SEC', '0'))
