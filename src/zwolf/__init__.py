"""Z-Wolf Epic rules core: derived character stats, dice checks and wealth."""

__version__ = "0.1.0"
