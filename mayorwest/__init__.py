"""Mayor West Mode: scaffolding for autonomous agent workflows on GitHub."""

__version__ = "1.2.0"
