"""
Inventory Service

Admin inventory for the boutique: variant combinations, per-combination
stock and the product variant editing workflow.
"""
