"""Application 服务"""
