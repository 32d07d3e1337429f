"""
Core report card logic.
"""
