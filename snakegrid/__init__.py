"""Grid-based snake game: an entity-component registry, gameplay systems and a pygame window."""

__version__ = "1.0.1"