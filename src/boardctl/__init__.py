"""boardctl — card ordering and relocation engine for multi-tenant task boards."""

__version__ = "0.3.0"
