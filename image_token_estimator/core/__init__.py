"""
Core modules for Image Token Estimator.

This package contains the model catalog, token estimation, pricing lookup
and multi-image summaries.
"""
