"""Market data layer -- result caching and candidate filtering/ranking."""

from scanner.market_data.candidate_filter import CandidateFilter
from scanner.market_data.result_cache import CacheEntry, ResultCache

__all__ = ["CacheEntry", "CandidateFilter", "ResultCache"]
