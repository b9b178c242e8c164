"""Version information for Manta Python SDK"""

__version__ = "1.0.0"
