"""Joseph's Squares — path legality and move availability for the connection game."""

__version__ = "0.1.0"
