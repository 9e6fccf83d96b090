"""設定の読み込み"""
