"""
The gift card token is the spendable balance of a gift card.
It is issued together with the card, conserved on transfers and only shrinks when the card is destroyed.
"""

from functools import partial

from gift_cards.onchain.util import *
from gift_cards.utils.config import REDEEM_BURN_TOLERANCE


def check_issue(token_app: App, tx: Transaction) -> None:
    """
    Tokens are issued once, for the full initial amount of a freshly minted card
    """
    nft_app = companion(token_app)
    minted = gift_cards_of(nft_app, tx.outs)
    assert len(minted) == 1, "Exactly one gift card must be minted"
    gift_card = minted[0]
    assert not charm_values(nft_app, input_charms(tx)), "Gift card already exists"
    assert sum_token_amount(token_app, input_charms(tx)) == 0, "Tokens already exist"
    assert (
        gift_card.remaining_balance == gift_card.initial_amount
    ), "Remaining balance must equal the initial amount"
    assert (
        sum_token_amount(token_app, tx.outs) == gift_card.initial_amount
    ), "Issued tokens must equal the initial amount"


def check_transfer(token_app: App, tx: Transaction) -> None:
    """
    Tokens are neither created nor destroyed. Spent cards must be backed by exactly the spent tokens
    and every produced card sits next to its own remaining balance, the rest may go elsewhere.
    """
    nft_app = companion(token_app)
    input_amount = sum_token_amount(token_app, input_charms(tx))
    assert input_amount == sum_token_amount(
        token_app, tx.outs
    ), "Token amount must be conserved"

    spent = gift_cards_of(nft_app, input_charms(tx))
    if spent:
        assert (
            sum([c.remaining_balance for c in spent]) == input_amount
        ), "Spent tokens must match the balance of the spent gift cards"

    for charms in tx.outs:
        for gift_card in gift_cards_of(nft_app, [charms]):
            assert (
                token_amount(token_app, charms) == gift_card.remaining_balance
            ), "Gift card must be accompanied by its remaining balance"


def check_redeem_and_burn(
    token_app: App, tx: Transaction, tolerance: int = REDEEM_BURN_TOLERANCE
) -> None:
    """
    The card is destroyed and (part of) its balance is paid out.
    Spent tokens may exceed the card balance by at most tolerance.
    """
    nft_app = companion(token_app)
    spent = gift_cards_of(nft_app, input_charms(tx))
    assert len(spent) == 1, "Exactly one gift card must be spent"
    assert not gift_cards_of(nft_app, tx.outs), "Gift card is not destroyed"
    balance = spent[0].remaining_balance

    input_amount = sum_token_amount(token_app, input_charms(tx))
    output_amount = sum_token_amount(token_app, tx.outs)
    assert 0 < output_amount <= balance, "Redeemed amount exceeds the gift card balance"
    assert input_amount >= output_amount, "Tokens can not be created"
    assert input_amount <= balance + tolerance, "Spent tokens exceed the gift card balance"


def token_rules(tolerance: int = REDEEM_BURN_TOLERANCE):
    return [
        ("issue", check_issue),
        ("transfer", check_transfer),
        ("redeem and burn", partial(check_redeem_and_burn, tolerance=tolerance)),
    ]


def validate_token(
    token_app: App, tx: Transaction, tolerance: int = REDEEM_BURN_TOLERANCE
) -> str:
    """
    Returns the name of the transition the transaction performs on the tokens
    """
    assert isinstance(token_app.tag, TokenRole), "Not a token app"
    return first_satisfied(token_rules(tolerance), token_app, tx)


def token_ok(
    identity: bytes,
    verification_key: bytes,
    tx: Transaction,
    tolerance: int = REDEEM_BURN_TOLERANCE,
) -> bool:
    try:
        validate_token(App(TokenRole(), identity, verification_key), tx, tolerance)
    except AssertionError:
        return False
    return True
