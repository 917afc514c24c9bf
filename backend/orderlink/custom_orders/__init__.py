"""Custom Orders module for OrderLink

Draft-order backed custom orders and templates, customer link resolution and
storefront checkout.
"""
