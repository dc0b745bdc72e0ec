"""Build and install PostgreSQL extensions from a native library and one SQL file."""

__version__ = "0.1.0"
