from .service import build_aggregation

__all__ = ["build_aggregation"]
