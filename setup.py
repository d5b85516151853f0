"""Setup script for the 'nft_batch_uploader' package."""
from setuptools import setup, find_packages

setup(
    name="nft-batch-uploader",  # Distribution name (pip install nft-batch-uploader)
    version="1.0.0",
    description="Validate image/metadata file sets and upload them to nft.storage",
    author="Your Company",
    packages=find_packages(include=["nft_batch_uploader", "nft_batch_uploader.*"]),
    python_requires=">=3.8",
    install_requires=[
        "typer>=0.9",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
        "requests>=2.28",
        "tqdm>=4.60",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0",
            "pytest-mock>=3.10",
            "pytest-html>=3.2",
        ],
    },
    entry_points={
        "console_scripts": [
            "nft-upload=nft_batch_uploader.nft_upload:main",
        ]
    }
)
