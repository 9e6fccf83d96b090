"""サービスの組み立て"""
