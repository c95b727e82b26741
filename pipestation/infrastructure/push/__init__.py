"""推送投递基础设施"""
