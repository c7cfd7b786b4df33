"""
Transaction module.

Handles transaction construction and external signing.
"""

from walletsend.tx.builder import TransactionBuilder, UnsignedTransaction
from walletsend.tx.signer import ExternalSigner, SignedTransaction, attach_signature

__all__ = [
    "ExternalSigner",
    "SignedTransaction",
    "TransactionBuilder",
    "UnsignedTransaction",
    "attach_signature",
]
