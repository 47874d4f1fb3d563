"""Infrastructure Layer: Contains concrete implementations and adapters.

Reference cache engine (memory + diskcache persistence), settings, logging
and the rich console display used by the CLI.
"""
