"""
py-worldgen: seeded generation of the physical layer of grid worlds.
"""

__version__ = "0.1.0"
