"""
Proof-of-Action receipt backend.
"""
__version__ = "0.1.0"
