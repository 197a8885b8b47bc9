"""
Garage management back end: a validated entity store over a key-value backend.
"""
__version__ = "3.0.0"
