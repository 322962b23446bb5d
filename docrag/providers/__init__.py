"""Concrete adapters for the contracts in ``docrag.interfaces``."""
