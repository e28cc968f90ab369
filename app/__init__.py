"""
Content Catalog Taxonomy API

Board/tag associations, freeform tag matching, engagement analytics and
taxonomy badge display for the content catalog.
"""

__version__ = "1.0.0"
