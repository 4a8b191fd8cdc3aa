"""
Client wallet provider adapter - Implements WalletProvider protocol.

The signer lives in the user's browser: the client asks the wallet for an
address (the user approves or cancels there) and hands the result to the
API. This adapter replays that answer to the domain. A missing address
means the user declined.
"""


class ClientWalletProvider:
    """
    Implements WalletProvider protocol from a client-supplied address.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, address: str | None = None) -> None:
        self._address = address

    def connect_wallet(self) -> str | None:
        if self._address is None or not self._address.strip():
            return None
        return self._address.strip()
