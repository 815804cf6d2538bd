"""Storefront API: catalog, customer profiles and orders."""
