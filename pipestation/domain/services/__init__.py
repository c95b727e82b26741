"""Domain Services 模块

领域服务：
- SchemaValidator: 按 FieldRule 声明校验配置记录
- generate_token: 不可猜测的 URL 安全 token
"""
