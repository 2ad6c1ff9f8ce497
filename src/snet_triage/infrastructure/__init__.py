"""
Infrastructure layer.

Storage adapters, text-generation providers, metrics and monitoring.
"""
