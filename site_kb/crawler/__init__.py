"""site_kb.crawler: fetcher, link crawler, sitemap discovery and merging."""
