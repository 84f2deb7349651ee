"""Pet adoption registry: users, shelters, pets and adoption records."""

__version__ = "0.1.0"
