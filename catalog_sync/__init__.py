"""
Product catalog service: Contentful entries merged with Google Sheets stock data.
"""
