"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.covid_stats_connector import CovidStatsConnector

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "CovidStatsConnector",
]
