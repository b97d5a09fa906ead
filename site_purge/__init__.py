# site_purge/__init__.py
"""
SitePurge package initializer.
Crawls a site and strips the CSS rules its pages never use.
"""
__version__ = "0.1.0"
