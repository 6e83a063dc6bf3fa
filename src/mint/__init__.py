"""mint - create Moleculer projects from templates."""

__version__ = "0.1.0"
