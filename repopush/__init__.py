"""RepoPush: upload ZIP archives into GitHub repositories, file by file."""

__version__ = "1.0.0"
