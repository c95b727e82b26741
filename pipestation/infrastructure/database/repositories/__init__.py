"""SQLAlchemy Repository 实现"""
