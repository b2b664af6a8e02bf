import re
from typing import Callable, Tuple

from opshin.prelude import *
from opshin.std.builtins import *

from gift_cards.onchain.types import *

# lowercase hex tx id, index without leading zeros
FUNDING_REFERENCE_PATTERN = re.compile(r"([0-9a-f]{64}):(0|[1-9][0-9]*)")


def identity_of(funding_reference: str) -> bytes:
    """
    Contract identity bound to the funding reference spent at mint
    """
    return sha2_256(funding_reference.encode())


def funding_reference_from_str(funding_reference: str) -> TxOutRef:
    """
    Parse the canonical "<tx id hex>:<index>" form of a spent output.
    Only the canonical text is accepted, so that every output has exactly one identity.
    """
    m = FUNDING_REFERENCE_PATTERN.fullmatch(funding_reference)
    assert (
        m is not None
    ), "Funding reference must have the form <64 lowercase hex chars>:<index>"
    tx_id_hex, idx_str = m.groups()
    return TxOutRef(TxId(bytes.fromhex(tx_id_hex)), int(idx_str))


def funding_reference_to_str(funding_reference: TxOutRef) -> str:
    return f"{funding_reference.id.tx_id.hex()}:{funding_reference.idx}"


def companion(app: App) -> App:
    """
    The counterpart of app: same identity and vk, the other role
    """
    if isinstance(app.tag, NftRole):
        tag = TokenRole()
    elif isinstance(app.tag, TokenRole):
        tag = NftRole()
    else:
        raise ValueError(f"Unknown role tag {app.tag!r}")
    return App(tag, app.identity, app.vk)


def input_charms(tx: Transaction) -> List[Charms]:
    return [i.charms for i in tx.ins]


def charm_values(app: App, bundles: List[Charms]) -> List[Anything]:
    """
    Values attached to app, at most one per bundle, in bundle order
    """
    return [charms[app] for charms in bundles if app in charms]


def unsigned(n: Anything) -> bool:
    return isinstance(n, int) and not isinstance(n, bool) and n >= 0


def valid_gift_card(v: Anything) -> bool:
    """
    Whether v is a gift card record with text fields as bytes and unsigned amounts and timestamps
    """
    return (
        isinstance(v, GiftCard)
        and isinstance(v.brand, bytes)
        and isinstance(v.image, bytes)
        and unsigned(v.initial_amount)
        and unsigned(v.expiration_date)
        and unsigned(v.created_at)
        and unsigned(v.remaining_balance)
    )


def gift_cards_of(nft_app: App, bundles: List[Charms]) -> List[GiftCard]:
    """
    Gift card records attached to nft_app. Fails if any value of nft_app is not a valid gift card.
    """
    gift_cards = charm_values(nft_app, bundles)
    assert all(
        [valid_gift_card(v) for v in gift_cards]
    ), "Value of the gift card NFT is not a valid gift card"
    return gift_cards


def token_amount(token_app: App, charms: Charms) -> int:
    """
    Amount of token_app in a single bundle, zero if absent
    """
    amount = charms.get(token_app, 0)
    assert unsigned(amount), "Token amount must be an unsigned integer"
    return amount


def sum_token_amount(token_app: App, bundles: List[Charms]) -> int:
    return sum([token_amount(token_app, charms) for charms in bundles])


def spends(tx: Transaction, utxo_id: TxOutRef) -> bool:
    return any([i.utxo_id == utxo_id for i in tx.ins])


def same_metadata(a: GiftCard, b: GiftCard) -> bool:
    """
    Whether the immutable part of two gift card records agrees
    """
    return (
        a.brand == b.brand
        and a.image == b.image
        and a.initial_amount == b.initial_amount
        and a.expiration_date == b.expiration_date
        and a.created_at == b.created_at
    )


def first_satisfied(rules: List[Tuple[str, Callable[..., None]]], *args) -> str:
    """
    Try the rules in order and return the name of the first one that holds.
    The order of the rules is part of the contract, they are not mutually exclusive.
    Fails with the reasons of all rules if none holds.
    """
    # the rules are plain asserts, without them every transaction would pass
    if not __debug__:
        raise RuntimeError(
            "Gift card rules can not be checked with assertions disabled (python -O)"
        )
    reasons = []
    for name, rule in rules:
        try:
            rule(*args)
        except AssertionError as e:
            reasons.append(f"{name}: {e}")
            continue
        return name
    assert False, "; ".join(reasons)
