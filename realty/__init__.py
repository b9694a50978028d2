"""Realty Manager: property, lease and ownership records with portfolio analytics"""

__version__ = '0.1.0'
