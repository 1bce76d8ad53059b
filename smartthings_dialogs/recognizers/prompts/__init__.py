from .loader import render
from .templates import Template

__all__ = ["Template", "render"]
