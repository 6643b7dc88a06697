"""User domain - Sign-up, sign-in and profiles"""
