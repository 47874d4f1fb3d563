"""Reference cache engine.

Memory layer, diskcache-backed persistence and the processor that implements
the ProcessorProviders contract on top of them.
Bounded Context: Cache Management
"""
