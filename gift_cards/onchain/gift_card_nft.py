"""
The gift card NFT carries the metadata and the remaining balance of one gift card.
It only guards the structure of the card; all balance arithmetic is left to the
companion token (see gift_card_token).
"""

from gift_cards.onchain.util import *


def decode_funding_reference(w: Anything) -> str:
    assert isinstance(w, bytes), "Witness must hold the funding reference"
    try:
        return w.decode()
    except UnicodeDecodeError:
        assert False, "Witness is not utf-8 text"


def check_mint(nft_app: App, tx: Transaction, w: Anything) -> None:
    """
    A new card is minted by spending the funding reference whose hash is the app identity.
    Exactly one card is minted and it starts out with its full amount.
    Expiration is not enforced on chain.
    """
    funding_reference = decode_funding_reference(w)
    assert (
        identity_of(funding_reference) == nft_app.identity
    ), "Identity does not match the funding reference"
    assert spends(
        tx, funding_reference_from_str(funding_reference)
    ), "Funding reference is not spent"

    minted = charm_values(nft_app, tx.outs)
    assert len(minted) == 1, "Exactly one gift card must be minted"
    gift_card = minted[0]
    assert valid_gift_card(gift_card), "Minted value is not a valid gift card"
    assert (
        gift_card.remaining_balance == gift_card.initial_amount
    ), "Remaining balance must equal the initial amount"


def check_no_input_card(nft_app: App, tx: Transaction, w: Anything) -> None:
    # the token side re-derives the mint conditions in this case
    assert not gift_cards_of(nft_app, input_charms(tx)), "Gift card is spent"
    # fails on produced values that are not well formed cards
    gift_cards_of(nft_app, tx.outs)


def check_destroy(nft_app: App, tx: Transaction, w: Anything) -> None:
    """
    The card is spent and does not reappear.
    Either tokens come out of the transaction, which the token side checks against the
    last balance of the card (redeem everything), or nothing comes out and there
    must have been tokens to burn.
    """
    assert gift_cards_of(nft_app, input_charms(tx)), "No gift card is spent"
    assert not gift_cards_of(nft_app, tx.outs), "Gift card is not destroyed"
    token_app = companion(nft_app)
    if sum_token_amount(token_app, tx.outs) > 0:
        return
    assert (
        sum_token_amount(token_app, input_charms(tx)) > 0
    ), "Burn must destroy a positive token balance"


def check_transfer(nft_app: App, tx: Transaction, w: Anything) -> None:
    """
    Cards move on (transfer or partial redeem). The n-th spent card continues as the n-th
    produced card and keeps its metadata. The remaining balance is checked by the token side.
    """
    spent = gift_cards_of(nft_app, input_charms(tx))
    produced = gift_cards_of(nft_app, tx.outs)
    assert spent, "No gift card is spent"
    assert len(spent) == len(produced), "Number of gift cards must be preserved"
    for before, after in zip(spent, produced):
        assert same_metadata(before, after), "Gift card metadata must not change"


NFT_RULES = [
    ("mint", check_mint),
    ("no input card", check_no_input_card),
    ("destroy", check_destroy),
    ("transfer", check_transfer),
]


def validate_nft(nft_app: App, tx: Transaction, w: Anything) -> str:
    """
    Returns the name of the transition the transaction performs on the card
    """
    assert isinstance(nft_app.tag, NftRole), "Not an NFT app"
    return first_satisfied(NFT_RULES, nft_app, tx, w)


def nft_ok(identity: bytes, verification_key: bytes, tx: Transaction, w: Anything) -> bool:
    try:
        validate_nft(App(NftRole(), identity, verification_key), tx, w)
    except AssertionError:
        return False
    return True
