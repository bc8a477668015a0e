"""Search, link extraction and page fetching for LibScout."""
