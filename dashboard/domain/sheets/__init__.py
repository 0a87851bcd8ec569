"""Sheets domain - published booking and expense spreadsheets"""
