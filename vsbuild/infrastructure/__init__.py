"""
Infrastructure providers
"""
