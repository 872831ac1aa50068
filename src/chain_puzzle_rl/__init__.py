"""Chain puzzle game engine with a gymnasium agent interface."""
