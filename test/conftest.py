from typing import List

import pytest
from opshin.ledger.api_v2 import TxId, TxOutRef

from gift_cards.onchain.types import App, CharmsInput, GiftCard, NftRole, TokenRole, Transaction

# funding utxo and the identity it hashes to
FUNDING_REFERENCE = "dc78b09d767c8565c4a58a95e7ad5ee22b28fc1685535056a395dc94929cdd5f:1"
IDENTITY = bytes.fromhex(
    "f54f6d40bd4ba808b188963ae5d72769ad5212dd1d29517ecc4063dd9f033faa"
)
VK = bytes.fromhex("1d7adfd77c17fec0df6ce3262d26a83318234c7d4e8a60659d331b395f67d6f0")


class GiftCardTxs:
    """
    Builders for gift card transactions
    """

    nft_app = App(NftRole(), IDENTITY, VK)
    token_app = App(TokenRole(), IDENTITY, VK)
    funding_reference = FUNDING_REFERENCE
    funding_utxo = TxOutRef(TxId(bytes.fromhex(FUNDING_REFERENCE.split(":")[0])), 1)
    # mint witness
    w = FUNDING_REFERENCE.encode()

    def card(
        self,
        remaining_balance: int = 100,
        initial_amount: int = 100,
        brand: bytes = b"Amazon",
        image: bytes = b"ipfs://QmGiftCardImage",
        expiration_date: int = 1798761600,
        created_at: int = 1767225600,
    ) -> GiftCard:
        return GiftCard(
            brand=brand,
            image=image,
            initial_amount=initial_amount,
            expiration_date=expiration_date,
            created_at=created_at,
            remaining_balance=remaining_balance,
        )

    def bundle(self, card: GiftCard = None, tokens: int = None) -> dict:
        charms = {}
        if card is not None:
            charms[self.nft_app] = card
        if tokens is not None:
            charms[self.token_app] = tokens
        return charms

    def tx(
        self, ins: List[dict] = (), outs: List[dict] = (), spend_funding: bool = False
    ) -> Transaction:
        inputs = [
            CharmsInput(TxOutRef(TxId(bytes([i + 1]) * 32), i), charms)
            for i, charms in enumerate(ins)
        ]
        if spend_funding:
            inputs.insert(0, CharmsInput(self.funding_utxo, {}))
        return Transaction(inputs, list(outs))

    def mint(self, amount: int = 100) -> Transaction:
        return self.tx(
            outs=[self.bundle(self.card(amount, amount), amount)], spend_funding=True
        )


@pytest.fixture(scope="session")
def txs() -> GiftCardTxs:
    return GiftCardTxs()
