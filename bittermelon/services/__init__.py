"""
Services Package

Business logic of the review aggregation engine:
- scales.py: rating scale registry and default scale seeding
- normalizer.py: raw score -> UP/DOWN classification
- certification.py: sweetness percentage and HoneyDew/HoneyDont badge
- stats_cache.py: read/replace access to the statistics tables
- locks.py: per-key locks serializing recomputes of the same key
- aggregation.py: affected-key recompute engine
- ledger.py: review mutations, each one atomic with its recomputes
- catalog.py: critic/feature/outlet lookups and creation
- cascades.py: catalog deletions that cascade into reviews
- reviews.py: the engine's public functions
"""
