UNIT = 10**18

# renBTC carries 8 decimals, collateral is tracked with 18
RENBTC_SCALE = 10**10

NETWORKS = {
    1: "mainnet",
    3: "ropsten",
    4: "rinkeby",
    5: "goerli",
    42: "kovan",
}
LOCAL_NETWORK = "local"

KNOWN_ACCOUNTS = {
    "mainnet": [
        {"name": "binance", "address": "0xF977814e90dA44bFA03b6295A0616a897441aceC"},
        {"name": "renBTCWallet", "address": "0x35fFd6E268610E764fF6944d07760D0EFe5E40E5"},
        {"name": "loansAccount", "address": "0x62f7A1F94aba23eD2dD108F8D23Aa3e7d452565B"},
    ],
    "rinkeby": [],
    "kovan": [],
}

# Protocol owner per network, used when a deployment carries no users.json
DEFAULT_OWNERS = {
    # first account of a hardhat or anvil node
    "local": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "mainnet": "0xEb3107117FEAd7de89Cd14D463D340A2E6917769",
    "kovan": "0x73570075092502472E4b61A7058Df1A4a1DB12f2",
    "rinkeby": "0x73570075092502472E4b61A7058Df1A4a1DB12f2",
    "ropsten": "0x73570075092502472E4b61A7058Df1A4a1DB12f2",
    "goerli": "0x48914229deDd5A9922f44441ffCCfC2Cb7856Ee9",
}

DEPLOYMENT_FILENAME = "deployment.json"
USERS_FILENAME = "users.json"
DEFAULT_DEPLOYMENT_ROOT = "publish/deployed"

# Balance checks tolerate gas spent by the account
DEPOSIT_TOLERANCE = 25 * 10**16  # 0.25 ether
OPEN_BORROW_TOLERANCE = 25 * 10**16
BORROW_TOLERANCE = 30 * 10**16  # 0.30 ether

DEFAULT_RPC_TIMEOUT = 60

# SNX an account needs per sUSD it issues
SNX_PER_SUSD = 10
# sUSD bought per sETH, on top of the rate, to cover exchange fees
EXCHANGE_FEE_HEADROOM = 11 * 10**17  # 1.1x

MOCK_BRIDGE_ADDRESS = "0x0000000000000000000000000000000000000001"
