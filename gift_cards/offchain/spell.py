import dataclasses
import json
import re
from pathlib import Path
from typing import Dict, List, Union

from opshin.prelude import Nothing
from pycardano import DeserializeException

from gift_cards.onchain.gift_cards import validate
from gift_cards.onchain.types import (
    App,
    Charms,
    CharmsInput,
    GiftCard,
    NftRole,
    TokenRole,
    Transaction,
)
from gift_cards.onchain.util import funding_reference_from_str, funding_reference_to_str
from gift_cards.utils.config import REDEEM_BURN_TOLERANCE

APP_PATTERN = re.compile(r"^([nt])/([0-9a-fA-F]{64})/([0-9a-fA-F]{64})$")
GIFT_CARD_FIELDS = (
    "brand",
    "image",
    "initial_amount",
    "expiration_date",
    "created_at",
    "remaining_balance",
)


@dataclasses.dataclass
class Spell:
    # alias -> app, foreign apps are kept as their raw string
    apps: Dict[str, Union[App, str]]
    tx: Transaction
    public_inputs: Dict[str, object]
    private_inputs: Dict[str, object]


@dataclasses.dataclass
class SpellVerdict:
    app: App
    valid: bool
    # name of the accepted transition or the reason for rejection
    detail: str


def app_from_str(app: str) -> App:
    m = APP_PATTERN.match(app)
    if m is None:
        raise ValueError(
            f"Invalid app {app!r}. "
            f'Expected format: "n/<64-char-hex>/<64-char-hex>" or "t/<64-char-hex>/<64-char-hex>"'
        )
    tag, identity, vk = m.groups()
    return App(
        NftRole() if tag == "n" else TokenRole(),
        bytes.fromhex(identity),
        bytes.fromhex(vk),
    )


def app_to_str(app: App) -> str:
    tag = "n" if isinstance(app.tag, NftRole) else "t"
    return f"{tag}/{app.identity.hex()}/{app.vk.hex()}"


def text_field(d: dict, field: str) -> bytes:
    value = d[field]
    if not isinstance(value, str):
        raise ValueError(f"Gift card field {field} must be a string, got {value!r}")
    return value.encode()


def int_field(d: dict, field: str) -> int:
    # 100.7, true and "100" are rejected, not converted
    value = d[field]
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Gift card field {field} must be an integer, got {value!r}")
    return value


def gift_card_from_json(d: dict) -> GiftCard:
    return GiftCard(
        brand=text_field(d, "brand"),
        image=text_field(d, "image"),
        initial_amount=int_field(d, "initial_amount"),
        expiration_date=int_field(d, "expiration_date"),
        created_at=int_field(d, "created_at"),
        remaining_balance=int_field(d, "remaining_balance"),
    )


def gift_card_to_json(gift_card: GiftCard) -> dict:
    return {
        "brand": gift_card.brand.decode(),
        "image": gift_card.image.decode(),
        "initial_amount": gift_card.initial_amount,
        "expiration_date": gift_card.expiration_date,
        "created_at": gift_card.created_at,
        "remaining_balance": gift_card.remaining_balance,
    }


def charm_value_from_json(app: Union[App, str], value):
    """
    Gift cards may be given as json object or as hex encoded cbor, everything else is passed on as is
    """
    if not isinstance(app, App) or not isinstance(app.tag, NftRole):
        return value
    if isinstance(value, dict) and set(value.keys()) == set(GIFT_CARD_FIELDS):
        return gift_card_from_json(value)
    if isinstance(value, str):
        try:
            return GiftCard.from_cbor(value)
        except (DeserializeException, ValueError):
            return value
    return value


def charms_from_json(apps: Dict[str, Union[App, str]], charms: dict) -> Charms:
    res = {}
    for alias, value in charms.items():
        if alias not in apps:
            raise ValueError(f"Charm refers to unknown app {alias}")
        app = apps[alias]
        res[app] = charm_value_from_json(app, value)
    return res


def input_from_json(value):
    if value is None:
        return Nothing()
    if isinstance(value, str):
        return value.encode()
    return value


def load_spell(spell: dict) -> Spell:
    apps = {}
    for alias, app in spell.get("apps", {}).items():
        if app[:2] in ("n/", "t/"):
            apps[alias] = app_from_str(app)
        else:
            apps[alias] = app

    ins = []
    for i in spell.get("ins", []):
        try:
            utxo_id = funding_reference_from_str(i["utxo_id"])
        except AssertionError as e:
            raise ValueError(f"Invalid utxo_id {i['utxo_id']!r}: {e}")
        ins.append(CharmsInput(utxo_id, charms_from_json(apps, i.get("charms", {}))))
    outs = [charms_from_json(apps, o.get("charms", {})) for o in spell.get("outs", [])]

    return Spell(
        apps=apps,
        tx=Transaction(ins, outs),
        public_inputs={
            alias: input_from_json(v)
            for alias, v in (spell.get("public_inputs") or {}).items()
        },
        private_inputs={
            alias: input_from_json(v)
            for alias, v in (spell.get("private_inputs") or {}).items()
        },
    )


def read_spell(path: Union[str, Path]) -> Spell:
    with open(path) as f:
        return load_spell(json.load(f))


def check_spell(
    spell: Spell, tolerance: int = REDEEM_BURN_TOLERANCE
) -> Dict[str, SpellVerdict]:
    """
    Run the gift card contract for every gift card app of the spell
    """
    verdicts = {}
    for alias, app in spell.apps.items():
        if not isinstance(app, App):
            continue
        try:
            transition = validate(
                app,
                spell.tx,
                spell.public_inputs.get(alias, Nothing()),
                spell.private_inputs.get(alias, Nothing()),
                tolerance,
            )
        except AssertionError as e:
            verdicts[alias] = SpellVerdict(app, False, str(e))
        else:
            verdicts[alias] = SpellVerdict(app, True, transition)
    return verdicts


def utxo_ids(spell: Spell) -> List[str]:
    return [funding_reference_to_str(i.utxo_id) for i in spell.tx.ins]
