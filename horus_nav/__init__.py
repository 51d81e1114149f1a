"""Voxel mapping, local path search, planning and trajectory control for drones."""

__version__ = "0.1.0"

__all__ = ["chunk", "voxel_grid", "geometry", "search", "controller", "mapper", "planners"]