"""Booking domain - Booking creation and status lifecycle"""
