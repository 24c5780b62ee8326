"""
GitHub contribution skyline generator.

Turns daily contribution counts into an OpenSCAD model of a city block whose
building heights follow activity, and optionally compiles it to STL.
"""

__version__ = "1.0.0"
