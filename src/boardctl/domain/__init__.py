"""Domain layer — identifiers and the position reconciler.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
