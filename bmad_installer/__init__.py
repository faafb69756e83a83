"""BMad installer - core assets, expansion packs and IDE rules."""

__version__ = "0.5.0"
