"""typedb-contexts - provision and switch named TypeDB contexts."""

__version__ = "0.1.0"
