"""nftmovie — NFT wallet gallery backend with RunwayML image-to-video conversion."""

__version__ = "0.1.0"
