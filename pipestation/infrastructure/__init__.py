"""Infrastructure 层"""
