"""
Diagnostic Report Cards

Renders per-patient report cards and exports single cards as PDF snapshots.
"""
__version__ = "0.1.0"
