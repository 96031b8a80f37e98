# Campaign Service Contracts

"""
Campaign Service Contract Module

This module contains:
- data_contract.py: test data factories for campaigns, provider sessions and access tokens
"""
