"""Plugin host for a car head unit: plugins, message routing, media players, settings, themes and audio control."""

__version__ = "0.1.0"