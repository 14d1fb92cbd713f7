"""
Services for BDA Food Search.

- ranking_service: containment and fuzzy ranking strategies
- search_service: FoodSearchEngine (load / search / get_meta / reset)
- consolidation_service: duplicate collapsing for scraped catalog entries
"""
