"""Domain modules: wallet ledger, bids, leaderboard, enquiries, auction and catalog."""
