"""Command-line interface for Sourcing Governance"""
