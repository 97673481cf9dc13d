"""
Test Suite for the Investor Watchlist

Unit tests for the valuation engine, storage backends, watchlist store,
calculator session, configuration and error handling.
"""
