from opshin.prelude import *
from opshin.ledger.api_v2 import TxId, TxOutRef


@dataclass(unsafe_hash=True)
class NftRole(PlutusData):
    CONSTR_ID = 0


@dataclass(unsafe_hash=True)
class TokenRole(PlutusData):
    CONSTR_ID = 1


RoleTag = Union[NftRole, TokenRole]


@dataclass(unsafe_hash=True)
class App(PlutusData):
    """
    Address of one contract instance.
    The NFT and the TOKEN of one gift card share identity and vk and only differ in the tag.
    """

    CONSTR_ID = 0
    tag: RoleTag
    # hash of the funding reference spent at mint
    identity: bytes
    # verification key of the contract, opaque
    vk: bytes


@dataclass
class GiftCard(PlutusData):
    CONSTR_ID = 0
    # utf-8 encoded brand name
    brand: bytes
    # utf-8 encoded image reference
    image: bytes
    initial_amount: int
    # unix timestamp
    expiration_date: int
    # unix timestamp
    created_at: int
    # the only field allowed to change after minting
    remaining_balance: int


# per input/output bundle, values of apps other than ours are opaque
Charms = Dict[App, Anything]


@dataclass
class CharmsInput(PlutusData):
    CONSTR_ID = 0
    utxo_id: TxOutRef
    charms: Charms


@dataclass
class Transaction(PlutusData):
    CONSTR_ID = 0
    ins: List[CharmsInput]
    outs: List[Charms]
