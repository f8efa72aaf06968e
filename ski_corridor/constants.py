"""Configuration constants for Ski Corridor.

All tunable generation parameters are centralized here for easy tuning.
The frozen dataclasses in model/settings.py take their defaults from these
classes, so a ride session always carries an explicit configuration value.

Classes:
    MountainConfig: Overall run length and altitude
    ChunkConfig: Chunk size and heightfield resolution
    TerrainConfig: Path spine, width, banking, moguls, canyon walls
    JumpConfig: Jump ramp spacing, shape and lateral band
    ObstacleConfig: Obstacle grid, per-surface rules and bucket capacities
    DifficultyConfig: Obstacle density multipliers per difficulty/game mode
"""


class MountainConfig:
    """Overall run parameters."""

    TOTAL_LENGTH_M = 3000  # Total Z distance of the run (also the meander period)
    START_ALTITUDE_M = 600  # Y height at start
    END_ALTITUDE_M = 0  # Y height at finish

    # Default descent per unit distance (start - end) / length
    DEFAULT_SLOPE_TANGENT = (START_ALTITUDE_M - END_ALTITUDE_M) / TOTAL_LENGTH_M


class ChunkConfig:
    """Chunk size and heightfield sampling resolution."""

    CHUNK_SEGMENTS = 20  # Path samples added per chunk
    HEIGHTFIELD_COLUMNS = 41  # Lateral samples per heightfield row (odd = centerline column)
    PLATEAU_MARGIN_M = 15.0  # Extra lateral extent past the wall top (heightfield + obstacle grid)

    # Points kept behind the last chunk for smoothing continuity
    TAIL_POINTS = 4


class TerrainConfig:
    """Path spine and terrain surface parameters."""

    SEGMENT_LENGTH = 8.0  # Distance between samples along the spine (lower = more detail, more cost)
    AMPLITUDE = 60.0  # Overall lateral swing of the path, i.e. "windiness"
    NOISE_SCALE = 0.02  # Frequency of the noise offset used for meanders
    MEANDER1_FREQ = 1.0  # Slow sine wave that creates large sweeping turns
    MEANDER2_FREQ = 2.0  # Faster sine wave layered on top for variation
    WIDTH_BASE = 30.0  # Average track width before per-point noise
    WIDTH_NOISE_SCALE = 0.01  # Frequency for width noise sampling along the run
    WIDTH_VARIATION = 0.4  # Strength of width noise (0 = uniform width)
    WIDTH_BULGE = 0.2  # Half-sine width bulge across a segment
    SMOOTHING_WINDOW = 5  # Window size for the moving average used to smooth X offsets
    BANKING_STRENGTH = 0.5  # Scales how aggressively turns bank the snow surface

    MOGUL_SCALE = 0.2
    MOGUL_HEIGHT = 0.7

    CANYON_FLOOR_OFFSET = 20.0  # Additional width beyond track for canyon floor
    CANYON_HEIGHT = 25.0  # The max height of the cliff
    WALL_WIDTH = 12.0  # How wide the wall is horizontally

    TERRACE_STEPS = 6  # Discrete steps on the cliff face
    LEDGE_FRACTION = 0.15  # First/last part of each terrace step that counts as a flat ledge
    TERRACE_DISPLACEMENT = 0.6  # Noise displacement as a fraction of one terrace step
    WALL_DETAIL_HEIGHT = 1.5  # Fine rock detail noise amplitude
    PLATEAU_NOISE_SCALE = 0.05
    PLATEAU_NOISE_HEIGHT = 3.0


# Wall noise at the foot of the cliff must stay within one terrace step of the bank
assert (
    TerrainConfig.TERRACE_DISPLACEMENT * TerrainConfig.CANYON_HEIGHT / TerrainConfig.TERRACE_STEPS
    + TerrainConfig.WALL_DETAIL_HEIGHT
    <= TerrainConfig.CANYON_HEIGHT / TerrainConfig.TERRACE_STEPS
)


class JumpConfig:
    """Jump ramp schedule and shape parameters."""

    DISTANCE_MEAN = 180.0  # Mean spacing between jump starts (arc-length)
    DISTANCE_STD = 60.0
    DISTANCE_MIN = 40.0  # Never closer than this (must exceed the longest ramp)
    DISTANCE_MAX = 320.0

    LENGTH_RANGE = (10.0, 18.0)
    HEIGHT_RANGE = (1.5, 3.5)

    RAMP_PHASE = 0.7  # Fraction of the ramp used by the smoothstep face, rest is the lip
    WIDTH_FRACTION = 0.35  # Lateral band as a fraction of usable width
    MIN_WIDTH_FRACTION = 0.05


assert JumpConfig.DISTANCE_MIN >= JumpConfig.LENGTH_RANGE[1], "Jumps must never overlap"
assert JumpConfig.DISTANCE_MIN <= JumpConfig.DISTANCE_MEAN <= JumpConfig.DISTANCE_MAX
assert 0 < JumpConfig.RAMP_PHASE < 1


class ObstacleConfig:
    """Obstacle scan grid and per-surface placement rules.

    Noise bands are (noise_min, noise_max, tree_size, proportion) tuples,
    checked in order. Proportion doubles as the band's spawn probability.
    """

    GRID_SPACING_M = 6.0
    DENSITY_NOISE_SCALE = 0.035  # Frequency of the second noise field (forest clumping)
    DENSITY_NOISE_SALT = 7919  # Seed offset for the density noise field
    POSITION_JITTER = 0.35  # In-cell jitter as a fraction of the grid spacing
    ROLLS_PER_CELL = 32  # Fixed random draws per cell

    MAX_INSTANCES = {
        "tree_small": 500,
        "tree_medium": 400,
        "tree_large": 250,
        "dead_tree": 150,
        "rock": 300,
    }

    TREE_SCALE = {
        # (mean, std, min, max)
        "small": (0.75, 0.12, 0.5, 1.0),
        "medium": (1.0, 0.15, 0.75, 1.3),
        "large": (1.35, 0.2, 1.0, 1.8),
    }
    ROCK_SCALE_RANGE = (0.7, 1.4)
    DEAD_TREE_SCALE_RANGE = (0.8, 1.2)
    TREE_LEAN_MAX_RAD = 0.06

    TRACK = {
        "rarity": 0.012,
        "type_proportions": {"tree": 0.3, "rock": 0.5, "dead_tree": 0.2},
        "size_proportions": {"small": 0.6, "medium": 0.3, "large": 0.1},
    }
    BANK = {
        "rarity": 0.35,
        "noise_bands": [
            (0.62, 1.01, "large", 0.25),
            (0.48, 0.62, "medium", 0.3),
            (0.35, 0.48, "small", 0.35),
        ],
        "rock_probability": 0.05,
    }
    CLIFF = {
        "rarity": 0.2,
        "noise_bands": [
            (0.55, 1.01, "medium", 0.2),
            (0.3, 0.55, "small", 0.3),
        ],
        "rock_probability": 0.15,
    }
    PLATEAU = {
        "rarity": 0.5,
        "dead_tree_band": (0.0, 0.22, 0.25),  # (noise_min, noise_max, probability)
        "noise_bands": [
            (0.58, 1.01, "large", 0.45),
            (0.42, 0.58, "medium", 0.4),
            (0.3, 0.42, "small", 0.3),
        ],
        "rock_probability": 0.04,
    }


assert set(ObstacleConfig.TREE_SCALE.keys()) == {"small", "medium", "large"}
assert all(low <= high for _, _, low, high in ObstacleConfig.TREE_SCALE.values())


class DifficultyConfig:
    """Obstacle density multipliers.

    Extreme doubles obstacle density; Chill halves it. Zen mode thins the
    field again on top of the difficulty multiplier.
    """

    DENSITY_MULTIPLIERS = {
        "CHILL": 0.5,
        "SPORT": 1.0,
        "EXTREME": 2.0,
    }
    DIFFICULTIES = list(DENSITY_MULTIPLIERS.keys())
    DEFAULT_DIFFICULTY = "SPORT"

    GAME_MODE_MULTIPLIERS = {
        "CLASSIC": 1.0,
        "ARCADE": 1.0,
        "ZEN": 0.5,
    }
    GAME_MODES = list(GAME_MODE_MULTIPLIERS.keys())
    DEFAULT_GAME_MODE = "CLASSIC"
