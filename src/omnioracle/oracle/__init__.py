"""Oracle resolution: collaborator boundary, simulated and HTTP sources, agreement rules."""

from omnioracle.oracle.anomaly import OracleOutcome, detect_anomalies, evaluate_sources
from omnioracle.oracle.base import OracleCollaborator, OracleRouter
from omnioracle.oracle.consult import consult
from omnioracle.oracle.http import HttpApiOracle
from omnioracle.oracle.simulated import SimulatedOracle

__all__ = [
    "OracleCollaborator",
    "OracleRouter",
    "OracleOutcome",
    "SimulatedOracle",
    "HttpApiOracle",
    "consult",
    "detect_anomalies",
    "evaluate_sources",
]
