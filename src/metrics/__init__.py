"""Count-comparison metrics."""

from .log_odds import LOG_ODDS_COLUMNS, LogOddsConfig, bind_log_odds, score_weighted_log_odds
from .records import InvalidInputError, Observation, ScoredRow

__all__ = [
    "InvalidInputError",
    "LOG_ODDS_COLUMNS",
    "LogOddsConfig",
    "Observation",
    "ScoredRow",
    "bind_log_odds",
    "score_weighted_log_odds",
]
