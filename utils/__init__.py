"""
Configuration, logging, workload loading and export helpers.
"""
