"""Six-stroke engine and drivetrain simulation."""

__version__ = "0.1.0"
