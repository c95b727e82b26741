"""Domain 层"""
