"""
Token metadata derived from a journal entry.

The output depends only on the entry snapshot and the creator settings, so
minting the same entry twice would describe it identically.
"""

from typing import Optional

from mindmint.journals.schemas import MOOD_EMOJIS, JournalEntryBase
from mindmint.ledger.engine import count_words, truncate_text
from mindmint.mint.schemas import NFTAttribute, NFTCreator, NFTMetadata, NFTProperties

PREVIEW_LENGTH = 100
OWNER_SHARE = 85
CREATOR_SHARE = 15


def build_nft_metadata(
    entry: JournalEntryBase,
    owner_address: str,
    creator_address: Optional[str] = None,
    image_base_url: str = "",
) -> NFTMetadata:
    """
    Builds the metadata document uploaded before minting.

    Args:
        entry (JournalEntryBase): Entry being minted, before the mint award.
        owner_address (str): Wallet that will own the token.
        creator_address (Optional[str]): App creator sharing royalties; the
            owner gets the full share when missing.
        image_base_url (str): Prefix of the per-entry image URL.

    Returns:
        NFTMetadata: Metadata for the token.
    """
    entry_date = entry.created_at.date().isoformat()
    preview = truncate_text(entry.content, PREVIEW_LENGTH)
    emoji = MOOD_EMOJIS.get(entry.mood, "🌟")

    if creator_address and creator_address != owner_address:
        creators = [
            NFTCreator(address=owner_address, share=OWNER_SHARE),
            NFTCreator(address=creator_address, share=CREATOR_SHARE),
        ]
    else:
        creators = [NFTCreator(address=owner_address, share=100)]

    return NFTMetadata(
        name=f"MindMint Journal - {entry_date}",
        description=(
            f'A mindfulness journal entry minted as an NFT. "{preview}" '
            f"Mood: {entry.mood.value} {emoji}"
        ),
        image=f"{image_base_url.rstrip('/')}/{entry.id}",
        attributes=[
            NFTAttribute(trait_type="Mood", value=entry.mood.value),
            NFTAttribute(trait_type="Clarity Points", value=entry.clarity_points),
            NFTAttribute(trait_type="Entry Date", value=entry_date),
            NFTAttribute(trait_type="Word Count", value=count_words(entry.content)),
        ],
        properties=NFTProperties(creators=creators),
    )
