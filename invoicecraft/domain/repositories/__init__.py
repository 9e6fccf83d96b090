"""リポジトリインターフェース"""
