"""請求書管理アプリケーション InvoiceCraft"""
