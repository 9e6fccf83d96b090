"""生成AI連携"""
