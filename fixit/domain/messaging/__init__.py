"""Messaging domain - Conversations, messages and live streams"""
