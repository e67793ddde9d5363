"""
HTTP front-end for multi-signature wallets
"""
