"""NFT batch uploader: validate image/metadata file sets and upload them to nft.storage."""

__version__ = "1.0.0"
