"""Googleスプレッドシートのデータアクセス"""
