"""Core numerical primitives for mlpnet."""

from . import activations, init, network, types

__all__ = ["activations", "init", "network", "types"]
