"""Domain Layer: value objects, errors and the ports the core depends on.

Nothing in here knows about diskcache, typer or rich.
"""
