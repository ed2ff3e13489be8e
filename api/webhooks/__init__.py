"""
Inbound identity-provider webhooks.
"""
