"""
Review service

MediaWiki section client, annotation import and the check-writing wizard.
"""

__version__ = "0.1.0"
