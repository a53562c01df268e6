"""
SiteBuilder: AI site generation backend.
"""
