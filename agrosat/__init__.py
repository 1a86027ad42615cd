"""
AgroSat: field monitoring API with satellite, weather and AI crop-health analysis
"""

__version__ = "1.0.0"
