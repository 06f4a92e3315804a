"""
Shared schema base.

Ledger payloads use camelCase on the wire (receivedAmount, receiptNumbers)
and snake_case in Python. Both spellings are accepted on input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
