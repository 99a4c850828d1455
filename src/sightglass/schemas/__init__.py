"""Pydantic schemas for events and analysis results."""

from .analysis import (
    AnalysisReport,
    ChainStats,
    DecisionChain,
    RiskAssessment,
    RiskFactor,
    RiskFactorType,
    RiskLevel,
    RiskSeverity,
    RiskStats,
    calculate_risk_level,
)
from .events import (
    Action,
    Agent,
    ClassifiedEvent,
    DiscoveryType,
    PackageManager,
    ParsedPackage,
    RawEvent,
    parse_timestamp,
)

__all__ = [
    "Action",
    "Agent",
    "AnalysisReport",
    "ChainStats",
    "ClassifiedEvent",
    "DecisionChain",
    "DiscoveryType",
    "PackageManager",
    "ParsedPackage",
    "RawEvent",
    "RiskAssessment",
    "RiskFactor",
    "RiskFactorType",
    "RiskLevel",
    "RiskSeverity",
    "RiskStats",
    "calculate_risk_level",
    "parse_timestamp",
]
