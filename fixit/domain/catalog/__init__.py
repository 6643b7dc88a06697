"""Catalog domain - Service listings and search"""
