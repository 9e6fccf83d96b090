"""PDFレンダラー"""
