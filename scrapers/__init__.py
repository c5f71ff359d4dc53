"""
Scraping strategies and the per-country cycle that runs them.

- ``dork``: search-engine ``site:`` queries against ATS domains (browser)
- ``widget``: the search engine's structured jobs widget (browser)
- ``feeds``: RSS/Atom aggregator feeds (plain HTTP)
"""
