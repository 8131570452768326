"""
Core domain: models, configuration, errors and the reconciliation stages.
"""
