"""
Entry point of the gift card contract.
Every gift card is a pair of apps with the same identity: the NFT holding the card and
the token holding its balance. The tag of the invoked app decides which side is checked.
"""

from gift_cards.onchain.gift_card_nft import validate_nft
from gift_cards.onchain.gift_card_token import validate_token
from gift_cards.onchain.util import *
from gift_cards.utils.config import REDEEM_BURN_TOLERANCE


def validate(
    app: App,
    tx: Transaction,
    x: Anything,
    w: Anything,
    tolerance: int = REDEEM_BURN_TOLERANCE,
) -> str:
    """
    Check tx against app with public input x and witness w.
    Returns the name of the accepted transition, fails with an AssertionError otherwise.
    Raises ValueError if app is neither an NFT nor a token app.
    """
    if isinstance(app.tag, NftRole):
        validate_side = lambda: validate_nft(app, tx, w)
    elif isinstance(app.tag, TokenRole):
        validate_side = lambda: validate_token(app, tx, tolerance)
    else:
        raise ValueError(f"Unknown role tag {app.tag!r}")
    assert isinstance(x, Nothing), "Public input must be empty"
    return validate_side()


def is_valid(
    app: App,
    tx: Transaction,
    x: Anything,
    w: Anything,
    tolerance: int = REDEEM_BURN_TOLERANCE,
) -> bool:
    try:
        validate(app, tx, x, w, tolerance)
    except AssertionError:
        return False
    return True
