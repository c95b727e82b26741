"""Pipestation - 可视化自动化流水线的定义、校验与 Webhook 推送服务"""
