"""
Wallet binding - attaches an externally controlled address to an identity.
"""

import logging
import re
from dataclasses import dataclass

from .exceptions import WalletDeclined, WalletUnavailable
from .models import BoundWallet
from .ports import IdentityRepository, WalletProvider

logger = logging.getLogger(__name__)

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_wallet_address(address: str) -> str:
    return address.strip().lower()


def is_valid_wallet_address(address: str) -> bool:
    return bool(WALLET_ADDRESS_PATTERN.match(address.strip()))


@dataclass
class WalletBinder:
    """
    Connects to the wallet provider and binds addresses to identities.

    Binding is idempotent: the same address twice is a no-op; a different
    address overwrites the previous one (last writer wins).
    """

    provider: WalletProvider
    identities: IdentityRepository

    def connect(self) -> str:
        """
        Ask the provider for an address.

        Blocks until the user approves or cancels.

        Raises:
            WalletDeclined: user refused, or the provider returned no usable address
            WalletUnavailable: provider unreachable
        """
        try:
            address = self.provider.connect_wallet()
        except WalletUnavailable:
            raise
        except Exception as exc:
            raise WalletUnavailable("Wallet provider failed") from exc

        if not address:
            raise WalletDeclined("Wallet connection declined")
        if not is_valid_wallet_address(address):
            logger.warning("Wallet provider returned malformed address: %r", address)
            raise WalletDeclined("Wallet address is not valid")
        return normalize_wallet_address(address)

    def bind(self, identity_id: str, address: str) -> BoundWallet:
        """Associate an address with an existing identity."""
        normalized = normalize_wallet_address(address)
        identity = self.identities.get_identity(identity_id)
        if identity is not None and identity.wallet_address == normalized:
            return BoundWallet(identity_id=identity_id, address=normalized, changed=False)

        self.identities.update_wallet_address(identity_id, normalized)
        logger.info("Wallet %s bound to identity %s", normalized, identity_id)
        return BoundWallet(identity_id=identity_id, address=normalized, changed=True)
