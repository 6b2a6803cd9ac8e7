"""
Web Crawlers for Exchange Rate Data

This package contains web crawlers that fetch exchange quotes from websites
by parsing HTML content. Crawlers cache results to avoid too frequent requests.
"""

from kzrate.adapters.crawlers.kurskz_crawler import KursKzCrawler

__all__ = ["KursKzCrawler"]
