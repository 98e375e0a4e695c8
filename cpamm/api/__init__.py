"""HTTP API for the AMM program."""
