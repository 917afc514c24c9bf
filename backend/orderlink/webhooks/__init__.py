"""Shopify webhook handling for purchase tracking"""
