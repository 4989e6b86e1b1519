"""Plugins shipped with boardctl and registered by the Store."""
