"""Bundled default data: combat tuning, base classes and the skill catalog."""
