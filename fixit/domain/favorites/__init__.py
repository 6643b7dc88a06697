"""Favorites domain - Saved services and providers"""
