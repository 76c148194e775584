"""
Pydantic schemas: products, search intents and API envelopes
"""
