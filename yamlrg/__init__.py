"""YAMLRG Members Portal"""

__version__ = "0.1.0"
