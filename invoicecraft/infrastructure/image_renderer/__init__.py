"""画像レンダラー"""
