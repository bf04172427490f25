"""
Command-line interface for Image Token Estimator.
"""
