"""Pricing, money helpers, notifications and cross-list moves."""
