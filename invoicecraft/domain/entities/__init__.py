"""エンティティ"""
