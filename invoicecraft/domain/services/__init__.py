"""ドメインサービス"""
