"""Dashboard domain - Client and provider summaries"""
