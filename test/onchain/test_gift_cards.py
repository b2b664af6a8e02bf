import copy
import os
import subprocess
import sys
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st
from opshin.prelude import Nothing

from gift_cards.onchain.gift_cards import is_valid, validate
from gift_cards.onchain.types import App, NftRole
from gift_cards.onchain.util import identity_of

ROOT = Path(__file__).resolve().parents[2]

DOUBLE_MINT = """
from opshin.prelude import Nothing
from gift_cards.onchain.gift_cards import is_valid
from gift_cards.onchain.types import App, GiftCard, NftRole, TokenRole, Transaction

nft_app = App(NftRole(), bytes(32), bytes(32))
token_app = App(TokenRole(), bytes(32), bytes(32))
card = GiftCard(b"Amazon", b"ipfs://QmGiftCardImage", 100, 1798761600, 1767225600, 100)
output = {nft_app: card, token_app: 100}
print(is_valid(token_app, Transaction([], [output, dict(output)]), Nothing(), Nothing()))
"""


def both_valid(txs, tx, w=Nothing()) -> bool:
    return is_valid(txs.nft_app, tx, Nothing(), w) and is_valid(
        txs.token_app, tx, Nothing(), Nothing()
    )


def test_mint_scenario(txs):
    tx = txs.mint(100)
    assert validate(txs.nft_app, tx, Nothing(), txs.w) == "mint"
    assert validate(txs.token_app, tx, Nothing(), Nothing()) == "issue"


def test_transfer_scenario(txs):
    tx = txs.tx(
        ins=[txs.bundle(txs.card(60), 60)],
        outs=[txs.bundle(txs.card(60), 60)],
    )
    assert both_valid(txs, tx)


def test_redeem_scenario(txs):
    tx = txs.tx(
        ins=[txs.bundle(txs.card(60), 60)],
        outs=[txs.bundle(txs.card(40), 40), txs.bundle(tokens=20)],
    )
    assert both_valid(txs, tx)


def test_double_mint_scenario(txs):
    tx = txs.tx(
        outs=[txs.bundle(txs.card(), 100), txs.bundle(txs.card(), 100)],
        spend_funding=True,
    )
    assert not both_valid(txs, tx, txs.w)
    assert not is_valid(txs.token_app, tx, Nothing(), Nothing())


def test_mint_with_wrong_balance_scenario(txs):
    tx = txs.tx(outs=[txs.bundle(txs.card(150, 100), 100)], spend_funding=True)
    assert not both_valid(txs, tx, txs.w)


def test_burn_leftover_scenario(txs):
    tx = txs.tx(
        ins=[txs.bundle(txs.card(60), 60), txs.bundle(tokens=5000)],
        outs=[txs.bundle(tokens=50)],
    )
    # the card may go, but the tokens left over are not accounted for
    assert is_valid(txs.nft_app, tx, Nothing(), Nothing())
    assert not is_valid(txs.token_app, tx, Nothing(), Nothing(), tolerance=1000)


def test_redeem_and_burn_scenario(txs):
    tx = txs.tx(ins=[txs.bundle(txs.card(60), 60)], outs=[txs.bundle(tokens=20)])
    assert validate(txs.nft_app, tx, Nothing(), Nothing()) == "destroy"
    assert validate(txs.token_app, tx, Nothing(), Nothing()) == "redeem and burn"


@pytest.mark.parametrize("x", [b"", b"\x00", 0, {}, []])
def test_public_input_must_be_empty(txs, x):
    assert not is_valid(txs.nft_app, txs.mint(), x, txs.w)
    assert not is_valid(txs.token_app, txs.mint(), x, Nothing())
    with pytest.raises(AssertionError, match="Public input"):
        validate(txs.token_app, txs.mint(), x, Nothing())


def test_unknown_role(txs):
    app = App(Nothing(), txs.nft_app.identity, txs.nft_app.vk)
    with pytest.raises(ValueError):
        is_valid(app, txs.mint(), Nothing(), txs.w)


def test_rejection_reasons(txs):
    tx = txs.tx(outs=[txs.bundle(tokens=100)])
    with pytest.raises(AssertionError) as e:
        validate(txs.token_app, tx, Nothing(), Nothing())
    for transition in ("issue", "transfer", "redeem and burn"):
        assert f"{transition}:" in str(e.value)


def test_inputs_not_mutated(txs):
    tx = txs.tx(
        ins=[txs.bundle(txs.card(60), 60)],
        outs=[txs.bundle(txs.card(40), 40), txs.bundle(tokens=20)],
    )
    before = copy.deepcopy(tx)
    both_valid(txs, tx)
    assert tx == before


@given(
    balance_in=st.integers(min_value=0, max_value=1000),
    balance_out=st.integers(min_value=0, max_value=1000),
    tokens_in=st.integers(min_value=0, max_value=1000),
    tokens_out=st.integers(min_value=0, max_value=1000),
    card_out=st.booleans(),
)
def test_deterministic(txs, balance_in, balance_out, tokens_in, tokens_out, card_out):
    tx = txs.tx(
        ins=[txs.bundle(txs.card(balance_in), tokens_in)],
        outs=[txs.bundle(txs.card(balance_out) if card_out else None, tokens_out)],
    )
    for app in (txs.nft_app, txs.token_app):
        assert is_valid(app, tx, Nothing(), Nothing()) == is_valid(
            app, tx, Nothing(), Nothing()
        )
    if card_out and both_valid(txs, tx):
        # a surviving card never gains balance
        assert balance_out <= balance_in


def test_malformed_witness_is_a_reject(txs):
    funding_reference = (
        "dc78b09d767c8565c4a58a95e7ad5ee22b28fc1685535056a395dc94929cdd5f:\u00b9"
    )
    app = App(NftRole(), identity_of(funding_reference), txs.nft_app.vk)
    tx = txs.tx(outs=[{app: txs.card()}], spend_funding=True)
    # not minted, the card is left to the token side
    assert validate(app, tx, Nothing(), funding_reference.encode()) == "no input card"


def run_double_mint(*flags: str) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        [str(ROOT)] + ([env["PYTHONPATH"]] if env.get("PYTHONPATH") else [])
    )
    return subprocess.run(
        [sys.executable, *flags, "-c", DOUBLE_MINT],
        capture_output=True,
        text=True,
        cwd=ROOT,
        env=env,
    )


def test_double_mint_rejected_in_subprocess():
    res = run_double_mint()
    assert res.returncode == 0, res.stderr
    assert res.stdout.strip() == "False"


def test_refuses_to_run_without_assertions():
    res = run_double_mint("-O")
    assert res.returncode != 0
    assert "RuntimeError" in res.stderr
    assert "assertions disabled" in res.stderr
