"""3D boids flocking: neighbor search, steering forces and integration."""

__version__ = "0.1.0"
