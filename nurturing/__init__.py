"""Nurturing / drip-campaign engine service."""
