"""Bus stop placement and ordering from rider address submissions."""

__version__ = "0.1.0"
