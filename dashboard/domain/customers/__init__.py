"""Customers domain - directory, booking counts and referrals"""
