"""
ssdl: Systems specification models with requirement and interface analysis.

Main interfaces: load(), Analyzer, SystemBuilder
"""

__version__ = "0.1.0"

from .analysis import Analyzer
from .builder import SystemBuilder
from .core.codec import dump, load

__all__ = ["Analyzer", "SystemBuilder", "dump", "load"]
