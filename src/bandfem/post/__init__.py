"""
The POST layer turns a solved model into result records, JSON and plots.
"""
