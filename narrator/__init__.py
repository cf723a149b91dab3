"""Article Narrator: articles in, narrated podcast feed out."""

__version__ = "1.0.0"
