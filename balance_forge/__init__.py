"""Balance Forge: typed, undoable stat tables for game balance data."""

__version__ = "0.1.0"
