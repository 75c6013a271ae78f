"""
Ton.Place public API integration.

- client.py: TonPlaceClient for listing and creating purchases
- exceptions.py: Structured upstream errors
"""
