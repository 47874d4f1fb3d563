"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that infrastructure components
must implement. The provider layer depends on these interfaces, not
concrete implementations.
"""
