"""
Integration layer: configuration loading, market wiring and state snapshots.
"""
