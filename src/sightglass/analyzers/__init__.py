"""Post-classification analysis: decision chains and risk scoring."""

from .chain_builder import ChainBuilder, build_chains, chain_id, get_chain_stats
from .risk_scorer import RiskScorer, get_risk_stats, score_risks

__all__ = [
    "ChainBuilder",
    "RiskScorer",
    "build_chains",
    "chain_id",
    "get_chain_stats",
    "get_risk_stats",
    "score_risks",
]
