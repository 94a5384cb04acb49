"""caseboard: causal mind-map editor for history cases."""

__version__ = "0.1.0"
