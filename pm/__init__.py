"""
pm - Corvid platform management CLI.
"""
