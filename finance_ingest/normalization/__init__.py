from finance_ingest.normalization.engine import Candidate, NormalizationEngine, normalize

__all__ = ["Candidate", "NormalizationEngine", "normalize"]
