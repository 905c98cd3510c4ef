"""Country roulette: spin a world map to pick the next unvisited country."""

__version__ = "0.1.0"
