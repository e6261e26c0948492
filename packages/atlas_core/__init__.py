"""Core sprite atlas primitives."""
