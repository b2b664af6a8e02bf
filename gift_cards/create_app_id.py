import click

from gift_cards.offchain.spell import app_to_str
from gift_cards.onchain.types import App, NftRole, TokenRole
from gift_cards.onchain.util import funding_reference_from_str, identity_of


@click.command()
@click.argument("funding_utxo")
@click.argument("vk")
def main(funding_utxo, vk):
    """
    Prints the identity and the NFT and token apps of a gift card minted by spending FUNDING_UTXO.
    """
    try:
        funding_reference_from_str(funding_utxo)
    except AssertionError as e:
        raise click.BadParameter(str(e), param_hint="FUNDING_UTXO")
    try:
        vk_bytes = bytes.fromhex(vk)
    except ValueError:
        raise click.BadParameter("must be hex encoded", param_hint="VK")
    if len(vk_bytes) != 32:
        raise click.BadParameter("must be 32 bytes", param_hint="VK")

    identity = identity_of(funding_utxo)
    print(f"identity: {identity.hex()}")
    print(f"nft app: {app_to_str(App(NftRole(), identity, vk_bytes))}")
    print(f"token app: {app_to_str(App(TokenRole(), identity, vk_bytes))}")


if __name__ == "__main__":
    main()
