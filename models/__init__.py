"""
Data models for the OS Resource Management Simulator.
"""
