GRID_ROWS = 8
GRID_COLS = 8

# Minimum run length that counts as a match.
MIN_MATCH = 3

# Token kinds spawned by default; a level may narrow or widen the set.
DEFAULT_KINDS = ['red', 'green', 'blue', 'yellow', 'purple', 'orange']

# Score awarded per resolved group, keyed by group size. Larger groups use the
# largest configured entry.
MATCH_SCORES = {3: 30, 4: 60, 5: 100}

# Score step between levels. Crossing ``level * MILESTONE`` advances the level.
MILESTONE = 1000

# Seconds of player inactivity before a hint search runs.
HINT_DELAY = 3.0

# Random layouts tried by a reshuffle before the deterministic fallback kicks in.
MAX_RESHUFFLE_ATTEMPTS = 200

# Attempts used by the initial board fill before giving up on a playable layout.
MAX_FILL_ATTEMPTS = 200

# Animation kinds acknowledged by the view layer via EVENT_ANIMATION_COMPLETE.
ANIM_SWAP = 'swap'
ANIM_REMOVE = 'remove'
ANIM_MOVE = 'move'
ANIM_CREATE = 'create'
ANIM_RESHUFFLE = 'reshuffle'
