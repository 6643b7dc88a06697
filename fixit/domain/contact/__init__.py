"""Contact domain - Public contact form"""
