"""Ski Corridor - Procedural downhill ride terrain.

Generates an endless (or finite) ski corridor chunk by chunk:
- Smoothed, meandering path spine with width, banking and arc-length
- Canyon cross-section with track, banks, terraced cliff walls and plateau
- Jump ramps scheduled along the arc-length with lateral bands
- Obstacle placements (trees, dead trees, rocks) driven by surface and noise

Modules:
    core: Generation primitives (noise, path spine, jump schedule, terrain sampler)
    model: Value types (PathPoint, TerrainSample, ObstaclePlacement, settings)
    generators: Region generation (obstacle planner, ride session)

Example:
    from ski_corridor.generators import RideSession

    session = RideSession(seed=42, difficulty="SPORT")
    chunk = session.build_next_chunk()
"""
