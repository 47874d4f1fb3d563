"""Core Application Layer: provider configuration, dispatch and error adaptation.

Connects callers with whatever engine implements ProcessorProviders.
"""
