"""ログ設定"""
