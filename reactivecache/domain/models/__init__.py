"""Value objects shared by the core and the engine."""
