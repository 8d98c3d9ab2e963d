"""site_kb.parser: HTML readability helpers and the sitemap XML parser."""
