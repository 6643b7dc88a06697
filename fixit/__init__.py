"""Fix-it services marketplace API"""
