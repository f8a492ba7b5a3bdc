"""
Core data model and numeric normalization.

Holds the immutable currency and wage snapshots, the price token produced
by extraction, and the conversion result types.
"""
