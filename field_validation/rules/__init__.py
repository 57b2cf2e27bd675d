"""
Rules and domain validators.

Each module holds the rules for one validator (temporal, email, url,
postal_code, social_security, luhn, prefix, phone_number) plus the
DomainValidator that assembles them into a check list.
"""
