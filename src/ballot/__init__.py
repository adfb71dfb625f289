"""Delegated Ballot — single-election voting ledger with transitive delegation."""
