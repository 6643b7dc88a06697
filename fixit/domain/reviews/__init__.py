"""Review domain - Reviews and rating aggregates"""
