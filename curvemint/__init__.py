"""
curvemint: bonding-curve pricing and settlement for serialized units.
"""
