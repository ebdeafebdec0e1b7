"""Service layer: token metadata lookups and record enrichment"""
