"""
newsseo - SEO publishing layer for a news website

Serves an XML sitemap, schema.org NewsArticle structured data and
accelerated mobile pages (AMP) for every published article.
"""

__version__ = "0.1.0"
