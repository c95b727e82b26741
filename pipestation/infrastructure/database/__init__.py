"""数据库基础设施"""
