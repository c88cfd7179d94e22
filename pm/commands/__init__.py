"""
pm command implementations.
"""
