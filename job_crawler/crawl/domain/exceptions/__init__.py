# Crawl Exceptions module
from .crawl_exceptions import CrawlError, StartUrlDisallowedError, JobFetchError, ConfigError

__all__ = ['CrawlError', 'StartUrlDisallowedError', 'JobFetchError', 'ConfigError']
