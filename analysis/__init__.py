"""
Metrics and run comparison for the OS Resource Management Simulator.
"""
