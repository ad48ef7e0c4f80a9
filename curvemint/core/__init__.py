"""
Core curve algorithms
"""
