"""CHIP-8 interpreter: machine, instruction set, pygame front end and command."""

__version__ = "0.1.0"
__all__ = ["__version__"]