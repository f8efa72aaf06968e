"""Generation settings - the explicit configuration value of a ride session.

Each dataclass takes its defaults from constants.py, so
GenerationSettings() is the stock configuration and tests or host
applications override single fields with dataclasses.replace().

Validation happens once, on construction. Generation code trusts the
settings it is given.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from ski_corridor.constants import (
    ChunkConfig,
    JumpConfig,
    MountainConfig,
    ObstacleConfig,
    TerrainConfig,
)
from ski_corridor.model.obstacle_placement import ObstacleType, TreeSize
from ski_corridor.model.terrain_sample import ObstacleZone


@dataclass(frozen=True)
class TerrainSettings:
    """Path spine and surface parameters (see TerrainConfig)."""

    segment_length: float = TerrainConfig.SEGMENT_LENGTH
    amplitude: float = TerrainConfig.AMPLITUDE
    noise_scale: float = TerrainConfig.NOISE_SCALE
    meander1_freq: float = TerrainConfig.MEANDER1_FREQ
    meander2_freq: float = TerrainConfig.MEANDER2_FREQ
    width_base: float = TerrainConfig.WIDTH_BASE
    width_noise_scale: float = TerrainConfig.WIDTH_NOISE_SCALE
    width_variation: float = TerrainConfig.WIDTH_VARIATION
    width_bulge: float = TerrainConfig.WIDTH_BULGE
    smoothing_window: int = TerrainConfig.SMOOTHING_WINDOW
    banking_strength: float = TerrainConfig.BANKING_STRENGTH
    mogul_scale: float = TerrainConfig.MOGUL_SCALE
    mogul_height: float = TerrainConfig.MOGUL_HEIGHT
    canyon_floor_offset: float = TerrainConfig.CANYON_FLOOR_OFFSET
    canyon_height: float = TerrainConfig.CANYON_HEIGHT
    wall_width: float = TerrainConfig.WALL_WIDTH
    terrace_steps: int = TerrainConfig.TERRACE_STEPS
    ledge_fraction: float = TerrainConfig.LEDGE_FRACTION
    terrace_displacement: float = TerrainConfig.TERRACE_DISPLACEMENT
    wall_detail_height: float = TerrainConfig.WALL_DETAIL_HEIGHT
    plateau_noise_scale: float = TerrainConfig.PLATEAU_NOISE_SCALE
    plateau_noise_height: float = TerrainConfig.PLATEAU_NOISE_HEIGHT
    total_length: float = MountainConfig.TOTAL_LENGTH_M

    def __post_init__(self) -> None:
        if self.segment_length <= 0:
            raise ValueError(f"segment_length must be positive, got {self.segment_length}")
        if self.width_base <= 0:
            raise ValueError(f"width_base must be positive, got {self.width_base}")
        if self.smoothing_window < 1:
            raise ValueError(f"smoothing_window must be >= 1, got {self.smoothing_window}")
        if self.wall_width <= 0:
            raise ValueError(f"wall_width must be positive, got {self.wall_width}")
        if self.terrace_steps < 1:
            raise ValueError(f"terrace_steps must be >= 1, got {self.terrace_steps}")
        if not 0 <= self.ledge_fraction <= 0.5:
            raise ValueError(f"ledge_fraction must be in [0, 0.5], got {self.ledge_fraction}")

    @property
    def terrace_step_height(self) -> float:
        return self.canyon_height / self.terrace_steps


@dataclass(frozen=True)
class JumpSettings:
    """Jump schedule parameters (see JumpConfig)."""

    distance_mean: float = JumpConfig.DISTANCE_MEAN
    distance_std: float = JumpConfig.DISTANCE_STD
    distance_min: float = JumpConfig.DISTANCE_MIN
    distance_max: float = JumpConfig.DISTANCE_MAX
    length_range: tuple[float, float] = JumpConfig.LENGTH_RANGE
    height_range: tuple[float, float] = JumpConfig.HEIGHT_RANGE
    ramp_phase: float = JumpConfig.RAMP_PHASE
    width_fraction: float = JumpConfig.WIDTH_FRACTION

    def __post_init__(self) -> None:
        if not 0 < self.distance_min <= self.distance_max:
            raise ValueError(f"Invalid jump spacing range [{self.distance_min}, {self.distance_max}]")
        if self.length_range[0] <= 0 or self.length_range[0] > self.length_range[1]:
            raise ValueError(f"Invalid jump length range {self.length_range}")
        if self.height_range[0] < 0 or self.height_range[0] > self.height_range[1]:
            raise ValueError(f"Invalid jump height range {self.height_range}")
        if self.length_range[1] > self.distance_min:
            raise ValueError(
                f"Longest jump ({self.length_range[1]}) exceeds minimum spacing ({self.distance_min}) - jumps would overlap"
            )
        if not 0 < self.ramp_phase < 1:
            raise ValueError(f"ramp_phase must be in (0, 1), got {self.ramp_phase}")


@dataclass(frozen=True)
class NoiseBand:
    """Noise range that maps to a candidate tree size.

    Attributes:
        noise_min: Inclusive lower bound of normalized noise
        noise_max: Exclusive upper bound of normalized noise
        tree_size: Candidate tree archetype
        proportion: Spawn probability once the band matches (0 disables it)
    """

    noise_min: float
    noise_max: float
    tree_size: TreeSize
    proportion: float

    def matches(self, noise: float) -> bool:
        return self.noise_min <= noise < self.noise_max


@dataclass(frozen=True)
class DeadTreeBand:
    """Dedicated plateau noise band for dead trees."""

    noise_min: float
    noise_max: float
    probability: float

    def matches(self, noise: float) -> bool:
        return self.noise_min <= noise < self.noise_max


@dataclass(frozen=True)
class SurfaceRule:
    """Placement rule for one obstacle zone.

    Track uses rarity + type/size proportions. Bank and cliff use noise
    bands with a rock fallback. Plateau checks its dead tree band first.
    """

    rarity: float
    type_proportions: dict[ObstacleType, float] = field(default_factory=dict)
    size_proportions: dict[TreeSize, float] = field(default_factory=dict)
    noise_bands: tuple[NoiseBand, ...] = ()
    rock_probability: float = 0.0
    dead_tree_band: Optional[DeadTreeBand] = None

    def __post_init__(self) -> None:
        if not 0 <= self.rarity <= 1:
            raise ValueError(f"rarity must be in [0, 1], got {self.rarity}")
        if any(weight < 0 for weight in self.type_proportions.values()):
            raise ValueError("type_proportions must not be negative")
        if any(weight < 0 for weight in self.size_proportions.values()):
            raise ValueError("size_proportions must not be negative")

    @classmethod
    def from_config(cls, config: dict) -> "SurfaceRule":
        """Build a rule from an ObstacleConfig surface dictionary."""
        dead_tree = config.get("dead_tree_band")
        return cls(
            rarity=config["rarity"],
            type_proportions={ObstacleType(k): v for k, v in config.get("type_proportions", {}).items()},
            size_proportions={TreeSize(k): v for k, v in config.get("size_proportions", {}).items()},
            noise_bands=tuple(
                NoiseBand(noise_min=lo, noise_max=hi, tree_size=TreeSize(size), proportion=p)
                for lo, hi, size, p in config.get("noise_bands", [])
            ),
            rock_probability=config.get("rock_probability", 0.0),
            dead_tree_band=DeadTreeBand(*dead_tree) if dead_tree is not None else None,
        )


def _default_surface_rules() -> dict[ObstacleZone, SurfaceRule]:
    return {
        ObstacleZone.TRACK: SurfaceRule.from_config(ObstacleConfig.TRACK),
        ObstacleZone.BANK: SurfaceRule.from_config(ObstacleConfig.BANK),
        ObstacleZone.CLIFF: SurfaceRule.from_config(ObstacleConfig.CLIFF),
        ObstacleZone.PLATEAU: SurfaceRule.from_config(ObstacleConfig.PLATEAU),
    }


@dataclass(frozen=True)
class ObstacleSettings:
    """Obstacle grid, capacities and per-zone rules (see ObstacleConfig)."""

    grid_spacing: float = ObstacleConfig.GRID_SPACING_M
    density_noise_scale: float = ObstacleConfig.DENSITY_NOISE_SCALE
    position_jitter: float = ObstacleConfig.POSITION_JITTER
    plateau_margin: float = ChunkConfig.PLATEAU_MARGIN_M
    max_instances: dict[str, int] = field(default_factory=lambda: dict(ObstacleConfig.MAX_INSTANCES))
    surface_rules: dict[ObstacleZone, SurfaceRule] = field(default_factory=_default_surface_rules)

    def __post_init__(self) -> None:
        if self.grid_spacing <= 0:
            raise ValueError(f"grid_spacing must be positive, got {self.grid_spacing}")
        missing = set(ObstacleZone) - set(self.surface_rules.keys())
        if missing:
            raise ValueError(f"surface_rules missing zones: {sorted(z.value for z in missing)}")

    def with_rarity(self, rarity: float) -> "ObstacleSettings":
        """Copy of these settings with every zone's rarity replaced."""
        rules = {zone: replace(rule, rarity=rarity) for zone, rule in self.surface_rules.items()}
        return replace(self, surface_rules=rules)


@dataclass(frozen=True)
class GenerationSettings:
    """Complete configuration of one ride session."""

    terrain: TerrainSettings = field(default_factory=TerrainSettings)
    jumps: JumpSettings = field(default_factory=JumpSettings)
    obstacles: ObstacleSettings = field(default_factory=ObstacleSettings)
    chunk_segments: int = ChunkConfig.CHUNK_SEGMENTS
    heightfield_columns: int = ChunkConfig.HEIGHTFIELD_COLUMNS
    tail_points: int = ChunkConfig.TAIL_POINTS

    def __post_init__(self) -> None:
        if self.chunk_segments < 1:
            raise ValueError(f"chunk_segments must be >= 1, got {self.chunk_segments}")
        if self.heightfield_columns < 2:
            raise ValueError(f"heightfield_columns must be >= 2, got {self.heightfield_columns}")
        if self.tail_points < 1:
            raise ValueError(f"tail_points must be >= 1, got {self.tail_points}")
