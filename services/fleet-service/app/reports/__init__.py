"""
Reporting layer - pure aggregations over fetched entity collections.
"""
