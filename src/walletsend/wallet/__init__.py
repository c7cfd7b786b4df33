"""
Wallet module.

Wraps the callback-based embedded wallet SDK behind an awaitable client.
"""

from walletsend.wallet.client import WalletClient
from walletsend.wallet.keypair import KeypairWalletSdk
from walletsend.wallet.sdk import Callback, WalletSdk

__all__ = [
    "Callback",
    "KeypairWalletSdk",
    "WalletClient",
    "WalletSdk",
]
