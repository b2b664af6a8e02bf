import json
import sys

import fire

from gift_cards.offchain.spell import (
    app_to_str,
    check_spell,
    gift_card_to_json,
    read_spell,
    utxo_ids,
)
from gift_cards.onchain.types import GiftCard
from gift_cards.utils.config import DEFAULT_CONFIG


def main(
    spell: str,
    tolerance: int = DEFAULT_CONFIG.redeem_burn_tolerance,
    show_cards: bool = False,
    exit_on_failure: bool = True,
):
    """
    Checks every gift card app of a spell (json) against the gift card contract.
    """
    loaded = read_spell(spell)
    print(f"spending: {', '.join(utxo_ids(loaded)) or '-'}")

    verdicts = check_spell(loaded, tolerance)
    for alias, verdict in verdicts.items():
        status = "ok" if verdict.valid else "FAILED"
        print(f"{alias} {app_to_str(verdict.app)}: {status} ({verdict.detail})")

    if show_cards:
        for i, charms in enumerate(loaded.tx.outs):
            for value in charms.values():
                if isinstance(value, GiftCard):
                    print(f"output {i}: {json.dumps(gift_card_to_json(value))}")
                    print(f"  cbor: {value.to_cbor_hex()}")

    if not verdicts:
        print("No gift card apps in spell")
    valid = all(v.valid for v in verdicts.values())
    if not valid and exit_on_failure:
        sys.exit(1)
    return valid


if __name__ == "__main__":
    fire.Fire(main)
