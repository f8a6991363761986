"""Domain records: products, purchase transactions and NFTs."""
