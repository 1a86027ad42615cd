"""
Field analysis pipeline for AgroSat.

Imagery and weather connectors, the synthetic fallback, the seasonal NDVI
model and stress classifier, and the AI insight generator. The
orchestrator in `agrosat.analysis.orchestrator` ties them together.
"""

from .weather import OpenMeteoClient, WeatherService
from .imagery import CopernicusClient, ImageryScene, ImageryUnavailable, ImageryFailure

__all__ = [
    'OpenMeteoClient',
    'WeatherService',
    'CopernicusClient',
    'ImageryScene',
    'ImageryUnavailable',
    'ImageryFailure'
]
