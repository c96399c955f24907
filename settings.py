# settings.py

# Board
GRID_SIZE = 10

# Tile ids (primitive cell values, or the `type` of an object cell)
TILE_FLOOR = 0
TILE_WALL = 1
TILE_GRASS = 2
TILE_EXIT = 3
TILE_ROCK = 4
TILE_HOUSE = 5
TILE_WATER = 6
TILE_FOOD = 7
TILE_ENEMY = 8
TILE_AXE = 9
TILE_HAMMER = 10
TILE_NOTE = 11
TILE_BISHOP_SPEAR = 12
TILE_SHRUBBERY = 13
TILE_BOMB = 24
TILE_HEART = 27
TILE_HORSE_ICON = 28
TILE_PORT = 29
TILE_PITFALL = 49

# Tiles an actor may step onto. Everything else blocks movement and sight.
WALKABLE_TILES = frozenset({
    TILE_FLOOR,
    TILE_WATER,
    TILE_FOOD,
    TILE_AXE,
    TILE_HAMMER,
    TILE_BISHOP_SPEAR,
    TILE_HORSE_ICON,
    TILE_BOMB,
    TILE_NOTE,
    TILE_HEART,
    TILE_PORT,
    TILE_PITFALL,
})

# Tactical AI
VULNERABILITY_THRESHOLD = 2      # Manhattan distance at which an actor is exposed
CLUSTER_SENTINEL = 100           # cluster distance reported when no allies exist
CLUSTER_GAIN_THRESHOLD = 0.3
MAX_TACTICAL_DETOUR = 2          # extra distance a tactical sidestep may add
LEADER_FOLLOW_MIN_GROUP = 3

# Scoring
ARCHETYPE_POINTS = {
    "pawn": 1,
    "king": 3,
    "knight": 3,
    "bishop": 3,
    "rook": 5,
    "queen": 9,
    "default": 1,
}
COMBO_MIN_FOR_BONUS = 2

# Events
EVENT_HISTORY_SIZE = 200
