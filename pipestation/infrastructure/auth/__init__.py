"""身份认证基础设施"""
