"""
Infrastructure services shared by the calculation (price lookup).
"""
