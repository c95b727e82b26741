"""Application 用例"""
