"""
MetaMask SDK connector constants.
"""

CONNECTOR_ID = "metaMaskSDK"
CONNECTOR_NAME = "MetaMask"

# Returned as the account when the wallet reports an empty account list
ZERO_ADDRESS = "0x"
