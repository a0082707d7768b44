"""
Output module for the route planner.
Handles generation of downloadable route snapshots.
"""
from .snapshot_csv import SnapshotCSVGenerator

__all__ = ["SnapshotCSVGenerator"]
