"""
Algorithms package for the OS Resource Management Simulator.
Contains CPU scheduling, contiguous memory allocation and deadlock detection implementations.
"""
