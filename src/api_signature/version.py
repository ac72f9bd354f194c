"""Version information for api-signature"""

__version__ = "0.1.0"
