"""
Test fixtures for the Rosetta fetcher.

Contains sample server responses:
- network_list.json: Two bitcoin networks (mainnet first)
- network_status.json: Current block 100, genesis block 0
- network_options.json: TRANSFER/FEE operations, SUCCESS/FAILURE statuses,
  historical balance lookup enabled
"""
